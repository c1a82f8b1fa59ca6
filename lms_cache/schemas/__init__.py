"""API response schemas (pydantic)."""

from lms_cache.schemas.health import (
    CacheHealthResponse,
    CacheUnavailableResponse,
    HealthResponse,
)

__all__ = ["CacheHealthResponse", "CacheUnavailableResponse", "HealthResponse"]
