"""API v1: operational routes (health) and cache dependencies."""

from lms_cache.api.v1.router import api_router

__all__ = ["api_router"]
