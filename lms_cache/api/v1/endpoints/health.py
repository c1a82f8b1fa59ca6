"""Health check endpoints: liveness and cache readiness."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lms_cache.api.v1.dependencies import get_cache
from lms_cache.infrastructure.cache import CacheService
from lms_cache.schemas.health import (
    CacheHealthResponse,
    CacheUnavailableResponse,
    HealthResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/cache",
    response_model=CacheHealthResponse,
    responses={503: {"description": "Cache disabled or unreachable", "model": CacheUnavailableResponse}},
)
async def cache_health(
    cache: Annotated[CacheService | None, Depends(get_cache)],
) -> CacheHealthResponse | JSONResponse:
    """Return 200 with hit/miss stats if Redis is reachable; 503 otherwise.

    The service keeps serving (always-miss) while the cache is down, so this
    is informational rather than a liveness signal.
    """
    if cache is None:
        message = "Redis cache disabled"
    else:
        stats = await cache.stats()
        if stats is not None:
            return CacheHealthResponse(stats=stats)
        message = "Redis unreachable"
    return JSONResponse(
        status_code=503,
        content=CacheUnavailableResponse(message=message).model_dump(),
    )
