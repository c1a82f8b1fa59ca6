"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, routers. Cache lifecycle lives
in lms_cache.core.lifespan.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI

from lms_cache.api.v1 import api_router
from lms_cache.core.config import get_settings
from lms_cache.core.exception_handlers import register_exception_handlers
from lms_cache.core.lifespan import create_lifespan
from lms_cache.infrastructure.cache import CacheService, CacheWarmer
from lms_cache.shared.telemetry.logging import setup_logging


def create_app(
    cache: CacheService | None = None,
    warmer: CacheWarmer | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        cache: Optional pre-built CacheService (tests or an embedding
            process); otherwise one is created from settings at startup.
        warmer: Optional CacheWarmer run once the cache is connected.
    """
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.cache = cache
    app.state.cache_warmer = warmer
    app.state.telemetry = None

    if settings.telemetry_enabled:
        from lms_cache.shared.telemetry.telemetry import TelemetryConfig

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        telemetry.instrument_fastapi(app)
        telemetry.instrument_redis()
        telemetry.instrument_logging()
        app.state.telemetry = telemetry

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
