"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring. The cache client is created
once here and handed to the services that need it through app.state;
there is no module-level cache singleton.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from lms_cache.core.config import get_settings
from lms_cache.infrastructure.cache import (
    CacheInvalidator,
    CacheService,
    CacheWarmer,
    ReadThroughCache,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: Redis cache (if enabled), read-through/invalidator
    wiring, warm-up. Shutdown order: cache disconnect, telemetry shutdown
    (telemetry itself is set up in create_app).
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.redis_enabled:
        cache = getattr(app.state, "cache", None) or CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
        app.state.read_through = ReadThroughCache(
            cache, single_flight=settings.cache_single_flight
        )
        app.state.invalidator = CacheInvalidator(cache)
        warmer = getattr(app.state, "cache_warmer", None)
        if isinstance(warmer, CacheWarmer) and warmer.entries:
            await warmer.warm_up(app.state.read_through)
    else:
        app.state.cache = None
        app.state.read_through = None
        app.state.invalidator = None
        logger.info("Redis cache disabled by configuration")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    if getattr(app.state, "telemetry", None) is not None:
        app.state.telemetry.shutdown()
        app.state.telemetry = None
