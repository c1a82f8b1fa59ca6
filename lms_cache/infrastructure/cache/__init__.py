"""Cache: Redis service, key builders, TTL policy, read-through and invalidation.

CacheService owns the Redis connection and never raises for store errors.
ReadThroughCache and CacheInvalidator are built on top of it (see
lms_cache.core.lifespan for wiring). Key format is in keys.py.
"""

from lms_cache.infrastructure.cache.cache_protocol import CacheProtocol
from lms_cache.infrastructure.cache.invalidation import (
    CacheInvalidator,
    InvalidationRecipe,
    InvalidationResult,
    class_recipe,
    student_recipe,
    user_recipe,
)
from lms_cache.infrastructure.cache.keys import (
    build_key,
    class_key,
    class_list_key,
    symmetric_key,
    thread_key,
    user_key,
)
from lms_cache.infrastructure.cache.read_through import ReadThroughCache, cached
from lms_cache.infrastructure.cache.redis_cache import CacheService
from lms_cache.infrastructure.cache.serialization import CacheNamespace
from lms_cache.infrastructure.cache.stats import CacheStats
from lms_cache.infrastructure.cache.ttl import DEFAULT_TTL_TIER, TTLTier, resolve_ttl
from lms_cache.infrastructure.cache.warmup import CacheWarmer, WarmupReport

__all__ = [
    "CacheInvalidator",
    "CacheNamespace",
    "CacheProtocol",
    "CacheService",
    "CacheStats",
    "CacheWarmer",
    "DEFAULT_TTL_TIER",
    "InvalidationRecipe",
    "InvalidationResult",
    "ReadThroughCache",
    "TTLTier",
    "WarmupReport",
    "build_key",
    "cached",
    "class_key",
    "class_list_key",
    "class_recipe",
    "resolve_ttl",
    "student_recipe",
    "symmetric_key",
    "thread_key",
    "user_key",
    "user_recipe",
]
