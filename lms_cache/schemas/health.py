"""Health check API schemas."""

from pydantic import BaseModel, Field

from lms_cache.infrastructure.cache.stats import CacheStats


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class CacheHealthResponse(BaseModel):
    """Response for GET /health/cache when Redis is reachable."""

    status: str = Field(default="ok", description="Cache status")
    stats: CacheStats


class CacheUnavailableResponse(BaseModel):
    """Response for GET /health/cache when Redis is disabled or unreachable (503)."""

    status: str = Field(default="degraded", description="Cache status")
    message: str = Field(..., description="Reason (e.g. Redis unreachable)")
