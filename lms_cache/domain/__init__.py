"""Domain layer: exceptions shared by the cache infrastructure and its callers."""

from lms_cache.domain.exceptions import (
    CacheSerializationError,
    InvalidCacheKeyError,
    LmsCacheException,
    ValidationException,
)

__all__ = [
    "CacheSerializationError",
    "InvalidCacheKeyError",
    "LmsCacheException",
    "ValidationException",
]
