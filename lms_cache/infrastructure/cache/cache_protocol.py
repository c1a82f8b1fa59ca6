"""Cache protocol used by the read-through and invalidation layers (DIP)."""

from typing import Any, Protocol

from lms_cache.infrastructure.cache.serialization import CacheNamespace
from lms_cache.infrastructure.cache.ttl import TTLTier


class CacheProtocol(Protocol):
    """Protocol for cache backends (e.g. Redis).

    Implementations never raise for backing-store errors; each operation
    returns its empty result (None / False / 0 / -1) instead.
    """

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str, namespace: CacheNamespace[Any] | None = None) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int | TTLTier | None = None) -> bool:
        """Store value with TTL in seconds (default tier when None)."""
        ...

    async def delete(self, *keys: Any) -> int:
        """Remove keys; return number actually removed."""
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def expire(self, key: str, ttl: int | TTLTier) -> bool:
        """Reset the TTL of an existing key. ttl is required; None is rejected."""
        ...

    async def ttl_remaining(self, key: str) -> int:
        """Seconds left, or -1 for no TTL / absent / error."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob; return number removed."""
        ...
