"""Redis-based cache service (Cache Access Layer).

Provides async Redis caching with TTL support. Every backing-store error is
caught, logged and turned into the empty result of the operation (None,
False, 0 or -1), so a Redis outage degrades the application to "always miss,
never cache" instead of failing requests. Key format lives in
lms_cache.infrastructure.cache.keys.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from lms_cache.core.config import Settings, get_settings
from lms_cache.domain.exceptions import CacheSerializationError
from lms_cache.infrastructure.cache.keys import escape_glob
from lms_cache.infrastructure.cache.serialization import CacheNamespace, dumps, loads
from lms_cache.infrastructure.cache.stats import CacheStats
from lms_cache.infrastructure.cache.ttl import TTLTier, resolve_ttl

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _flatten_keys(keys: tuple[str | Iterable[str], ...]) -> list[str]:
    """Accept delete("a", "b") as well as delete(["a", "b"])."""
    flat: list[str] = []
    for item in keys:
        if isinstance(item, (str, bytes)):
            flat.append(item)
        else:
            flat.extend(item)
    return flat


class CacheService:
    """Async Redis cache service with TTL support.

    Holds only the connection handle; cached data lives in Redis. Construct
    once per process, call connect() at startup and disconnect() at shutdown
    (see lms_cache.core.lifespan). A client passed in (tests or DI) is owned
    by the caller: it is neither rebuilt on reconnect nor closed here.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings; defaults to get_settings().
        """
        self.settings = settings or get_settings()
        self.redis = redis_client
        self.default_ttl = self.settings.cache_default_ttl
        self.scan_batch_size = self.settings.cache_scan_batch_size
        self.key_prefix = self.settings.cache_key_prefix
        self._owns_client = redis_client is None
        self._connected = False
        self._last_connect_attempt: float | None = None
        # Serializes client rebuilds so one outage yields one new pool.
        self._lifecycle_lock = asyncio.Lock()

    def _build_client(self) -> redis.Redis:
        """Pooled client from settings; retries with backoff capped at 2s."""
        s = self.settings
        return redis.Redis(
            host=s.redis_host,
            port=s.redis_port,
            db=s.redis_db,
            password=s.redis_password.get_secret_value() if s.redis_password else None,
            ssl=s.redis_use_ssl,
            max_connections=s.redis_max_connections,
            decode_responses=True,
            socket_connect_timeout=s.redis_connect_timeout,
            socket_timeout=s.redis_socket_timeout,
            socket_keepalive=True,
            retry=Retry(ExponentialBackoff(cap=2.0, base=0.05), s.redis_retry_attempts),
        )

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup.

        On failure the service stays unavailable (every read misses) and a
        later operation retries after redis_reconnect_interval seconds.
        """
        self._last_connect_attempt = time.monotonic()
        if self.redis is None:
            self.redis = self._build_client()
        try:
            await self.redis.ping()
        except redis.RedisError as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            self._connected = False
            if self._owns_client:
                await self._close_client()
            return
        self._connected = True
        logger.info(
            "Redis cache connected: %s:%s/%s",
            self.settings.redis_host,
            self.settings.redis_port,
            self.settings.redis_db,
        )

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        was_connected = self._connected
        self._connected = False
        if self._owns_client:
            await self._close_client()
        if was_connected:
            logger.info("Redis cache disconnected")

    async def _close_client(self) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.aclose()
        except redis.RedisError as e:
            logger.debug("Ignoring error while closing Redis client: %s", e)
        self.redis = None

    async def _reconnect(self, failed: redis.Redis | None) -> bool:
        """Rebuild an owned client after a connection error. Returns True if reconnected.

        failed is the client the caller saw fail. If another coroutine has
        already replaced it, that replacement is reused instead of building
        a second pool.
        """
        if not self._owns_client:
            return False
        async with self._lifecycle_lock:
            if self.redis is not failed:
                return self.is_available()
            await self._close_client()
            self._connected = False
            await self.connect()
            return self._connected

    async def _ensure_available(self) -> bool:
        """True when usable; retries connect for owned clients once the interval has passed."""
        if self.is_available():
            return True
        if not self._owns_client or self._last_connect_attempt is None:
            return False
        async with self._lifecycle_lock:
            if self.is_available():
                return True
            elapsed = time.monotonic() - self._last_connect_attempt
            if elapsed < self.settings.redis_reconnect_interval:
                return False
            await self.connect()
            return self.is_available()

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    def _prefixed(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _prefixed_pattern(self, pattern: str) -> str:
        return f"{escape_glob(self.key_prefix)}{pattern}"

    def _unprefixed(self, key: str) -> str:
        return key[len(self.key_prefix):] if self.key_prefix else key

    async def _execute(
        self,
        operation: str,
        target: str,
        command: Callable[[redis.Redis], Awaitable[R]],
        default: R,
    ) -> R:
        """Run one Redis command; on any Redis error log it and return default."""
        if not await self._ensure_available() or self.redis is None:
            return default
        client = self.redis
        try:
            return await command(client)
        except (redis.ConnectionError, redis.TimeoutError):
            if await self._reconnect(client) and self.redis is not None:
                try:
                    return await command(self.redis)
                except redis.RedisError:
                    logger.exception("Cache %s error for %s after reconnect", operation, target)
                    return default
            logger.warning("Cache %s unavailable for %s (Redis disconnected)", operation, target)
            return default
        except redis.RedisError:
            logger.exception("Cache %s error for %s", operation, target)
            return default

    async def get(self, key: str, namespace: CacheNamespace[Any] | None = None) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable.

        Args:
            key: Cache key (use lms_cache.infrastructure.cache.keys builders).
            namespace: Optional declared value shape; payloads that do not
                match are discarded and reported as a miss.

        Returns:
            Cached value or None.
        """
        raw = await self._execute("get", key, lambda r: r.get(self._prefixed(key)), None)
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = loads(raw, namespace, key)
        except CacheSerializationError as e:
            logger.warning("Cache payload discarded for key %s: %s", key, e.message)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int | TTLTier | None = None) -> bool:
        """Store value with TTL. Returns True on success, never raises.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable, pydantic models allowed).
            ttl: Seconds or TTLTier; None uses the default tier.

        Returns:
            True if stored, False otherwise.
        """
        try:
            seconds = resolve_ttl(ttl, self.default_ttl)
            serialized = dumps(value, key)
        except (ValueError, CacheSerializationError) as e:
            logger.error("Cache set rejected for key %s: %s", key, e)
            return False
        stored = await self._execute(
            "set", key, lambda r: r.setex(self._prefixed(key), seconds, serialized), False
        )
        if stored:
            logger.debug("Cache SET: %s (TTL: %ss)", key, seconds)
        return bool(stored)

    async def delete(self, *keys: str | Iterable[str]) -> int:
        """Remove one or more keys. Returns the number actually removed.

        Absent keys count as zero; an empty call does not touch Redis.
        Multi-key deletes are not atomic as a unit; calling again is safe.
        """
        key_list = _flatten_keys(keys)
        if not key_list:
            return 0
        full_keys = [self._prefixed(k) for k in key_list]
        removed = await self._execute(
            "delete", ", ".join(key_list), lambda r: r.delete(*full_keys), 0
        )
        logger.debug("Cache DELETE: %s (%s removed)", key_list, removed)
        return int(removed)

    async def exists(self, key: str) -> bool:
        """Return True if key is present."""
        count = await self._execute("exists", key, lambda r: r.exists(self._prefixed(key)), 0)
        return int(count) == 1

    async def expire(self, key: str, ttl: int | TTLTier) -> bool:
        """Refresh expiration of an existing key. False if absent, on error, or for a bad ttl.

        Unlike set(), ttl has no default: None is rejected.
        """
        if ttl is None:
            logger.error("Cache expire rejected for key %s: ttl is required", key)
            return False
        try:
            seconds = resolve_ttl(ttl, self.default_ttl)
        except ValueError as e:
            logger.error("Cache expire rejected for key %s: %s", key, e)
            return False
        expired = await self._execute(
            "expire", key, lambda r: r.expire(self._prefixed(key), seconds), False
        )
        return bool(expired)

    async def ttl_remaining(self, key: str) -> int:
        """Return seconds until expiry, or -1 for no TTL, absent key, or error.

        Callers that need to tell these apart should call exists() first.
        """
        remaining = await self._execute("ttl", key, lambda r: r.ttl(self._prefixed(key)), -1)
        return int(remaining) if remaining >= 0 else -1

    async def keys_matching(self, pattern: str) -> list[str]:
        """Return keys matching a glob using SCAN (non-blocking on the server)."""

        async def _scan(r: redis.Redis) -> list[str]:
            match = self._prefixed_pattern(pattern)
            return [
                self._unprefixed(key)
                async for key in r.scan_iter(match=match, count=self.scan_batch_size)
            ]

        return await self._execute("scan", pattern, _scan, [])

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK.

        O(n) over the keys matching the pattern; meant for maintenance-grade
        invalidation, not hot paths over unbounded prefixes. If a batch fails
        after earlier batches succeeded, the count already removed is
        returned; nothing is rolled back.

        Args:
            pattern: Redis glob pattern (e.g. thread:user-1:*).

        Returns:
            Number of keys deleted.
        """
        if not await self._ensure_available() or self.redis is None:
            return 0
        client = self.redis
        match = self._prefixed_pattern(pattern)
        deleted = 0
        try:
            chunk: list[str] = []
            async for key in client.scan_iter(match=match, count=self.scan_batch_size):
                chunk.append(key)
                if len(chunk) >= self.scan_batch_size:
                    deleted += int(await client.unlink(*chunk))
                    chunk = []
            if chunk:
                deleted += int(await client.unlink(*chunk))
        except (redis.ConnectionError, redis.TimeoutError):
            logger.warning(
                "Cache delete_pattern interrupted for %s after %s keys (Redis disconnected)",
                pattern,
                deleted,
            )
            await self._reconnect(client)
            return deleted
        except redis.RedisError:
            logger.exception("Cache delete_pattern error for %s after %s keys", pattern, deleted)
            return deleted
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    async def flush(self) -> bool:
        """Clear the selected Redis db. Use with caution.

        FLUSHDB ignores cache_key_prefix: keys of other prefixes sharing the
        db are cleared too.

        Returns:
            True if cleared, False otherwise.
        """
        flushed = await self._execute("flush", "db", lambda r: r.flushdb(), False)
        if flushed:
            logger.warning("Cache CLEARED: all keys deleted")
        return bool(flushed)

    async def stats(self) -> CacheStats | None:
        """Return hit/miss counters and key count, or None when unavailable."""
        info = await self._execute("info", "stats", lambda r: r.info("stats"), None)
        if info is None:
            return None
        size = await self._execute("dbsize", "db", lambda r: r.dbsize(), 0)
        return CacheStats(
            hits=int(info.get("keyspace_hits", 0)),
            misses=int(info.get("keyspace_misses", 0)),
            keys=int(size),
            connected=self.is_available(),
        )
