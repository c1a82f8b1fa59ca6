"""API v1 router aggregation. Operational routes only."""

from fastapi import APIRouter

from lms_cache.api.v1.endpoints import health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
