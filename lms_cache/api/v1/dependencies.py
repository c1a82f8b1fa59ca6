"""FastAPI dependencies for the cache layer.

The cache objects are created once in the lifespan (app.state); these
dependencies only hand them out. When Redis is disabled they return None
and callers fall back to the system of record.
"""

from fastapi import Request

from lms_cache.infrastructure.cache import (
    CacheInvalidator,
    CacheService,
    ReadThroughCache,
)


def get_cache(request: Request) -> CacheService | None:
    """CacheService from app.state, or None when Redis is disabled."""
    return getattr(request.app.state, "cache", None)


def get_read_through(request: Request) -> ReadThroughCache | None:
    """ReadThroughCache for fetch-or-compute reads in services."""
    return getattr(request.app.state, "read_through", None)


def get_invalidator(request: Request) -> CacheInvalidator | None:
    """CacheInvalidator for entity-mutation handlers (call after a successful write)."""
    return getattr(request.app.state, "invalidator", None)
