"""Read-through orchestration: fetch from cache or compute, store, and return.

get_or_compute consults the cache, calls the producer only on a miss, stores
the fresh value and returns it whether or not the store succeeded. Producer
errors propagate unchanged. Concurrent misses on the same key may each call
the producer (at-least-once) unless single_flight is enabled, in which case
callers in this process share one in-flight producer call per key.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from functools import partial, wraps
from typing import Any, TypeVar

from lms_cache.infrastructure.cache.cache_protocol import CacheProtocol
from lms_cache.infrastructure.cache.serialization import CacheNamespace
from lms_cache.infrastructure.cache.ttl import TTLTier
from lms_cache.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

T = TypeVar("T")

Producer = Callable[[], Awaitable[T] | T]


async def _call_producer(producer: Producer[T]) -> T:
    """Call a sync or async zero-argument producer."""
    result = producer()
    if inspect.isawaitable(result):
        return await result
    return result


class ReadThroughCache:
    """Fetch-or-compute access over a CacheProtocol backend.

    Holds no cached values itself. With single_flight=True it keeps a map of
    key -> producer task for misses currently being computed; entries are
    removed as soon as the producer finishes.
    """

    def __init__(self, cache: CacheProtocol, *, single_flight: bool = False) -> None:
        self.cache = cache
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    @traced("cache.get_or_compute")
    async def get_or_compute(
        self,
        key: str,
        producer: Producer[T],
        ttl: int | TTLTier | None = None,
        namespace: CacheNamespace[Any] | None = None,
    ) -> T:
        """Return the cached value for key, or compute, cache and return it.

        Args:
            key: Cache key (from lms_cache.infrastructure.cache.keys).
            producer: Zero-argument callable (sync or async) returning the
                fresh value. Must be safe to call more than once.
            ttl: Seconds or TTLTier; None uses the default tier.
            namespace: Optional declared value shape for the cached payload.

        Returns:
            Cached or freshly produced value. A produced None is returned
            but not cached.

        Raises:
            Whatever the producer raises, unchanged.
        """
        cached = await self.cache.get(key, namespace=namespace)
        if cached is not None:
            add_span_attributes(cache_key=key, cache_hit=True)
            return cached
        add_span_attributes(cache_key=key, cache_hit=False)

        if not self.single_flight:
            return await self._compute_and_store(key, producer, ttl)

        task = self._in_flight.get(key)
        if task is not None:
            logger.debug("Cache miss for %s joined in-flight computation", key)
            return await asyncio.shield(task)

        # The producer runs in its own task: cancelling the caller that
        # started it leaves the computation running for the other waiters.
        task = asyncio.create_task(self._compute_and_store(key, producer, ttl))
        self._in_flight[key] = task
        task.add_done_callback(partial(self._finish_in_flight, key))
        return await asyncio.shield(task)

    def _finish_in_flight(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark retrieved so a failure nobody awaited is not reported by asyncio.
            task.exception()

    async def _compute_and_store(
        self, key: str, producer: Producer[T], ttl: int | TTLTier | None
    ) -> T:
        value = await _call_producer(producer)
        if value is None:
            logger.debug("Producer for %s returned None; not cached", key)
            return value
        if not await self.cache.set(key, value, ttl):
            logger.warning("Cache set failed for key %s; returning fresh value", key)
        return value

    def in_flight_keys(self) -> list[str]:
        """Keys with a producer call currently running (single-flight mode only)."""
        return list(self._in_flight)


def _resolve_read_through(
    args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[ReadThroughCache | None, tuple[Any, ...], dict[str, Any]]:
    """Resolve the ReadThroughCache and the arguments used to build the key.

    Resolution order: keyword "read_through", then args[0].read_through.
    Returns (read_through, key_args, call_kwargs) where call_kwargs excludes
    the "read_through" keyword.
    """
    call_kwargs = {k: v for k, v in kwargs.items() if k != "read_through"}
    candidate = kwargs.get("read_through")
    if isinstance(candidate, ReadThroughCache):
        return candidate, args, call_kwargs
    if args:
        attr = getattr(args[0], "read_through", None)
        if isinstance(attr, ReadThroughCache):
            return attr, args[1:], call_kwargs
    return None, args, call_kwargs


def cached(
    key_builder: Callable[..., str],
    ttl: int | TTLTier | None = None,
    namespace: CacheNamespace[Any] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator to serve an async function through ReadThroughCache.

    The wrapped function gets its ReadThroughCache from either:
    - keyword argument "read_through" (not forwarded to the function), or
    - a .read_through attribute on its first argument (service methods).
    Without one, the function is called directly.

    Args:
        key_builder: Called with the function's arguments (minus self when
            resolved from the instance) and returns the cache key.
        ttl: Seconds or TTLTier for stored results.
        namespace: Optional declared value shape.

    Example:
        class ClassService:
            def __init__(self, repo, read_through):
                self.repo = repo
                self.read_through = read_through

            @cached(class_key, ttl=TTLTier.LONG)
            async def get_class(self, class_id: str) -> dict:
                return await self.repo.get(class_id)
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            read_through, key_args, call_kwargs = _resolve_read_through(args, kwargs)
            if read_through is None:
                return await func(*args, **call_kwargs)
            key = key_builder(*key_args, **call_kwargs)
            return await read_through.get_or_compute(
                key,
                lambda: func(*args, **call_kwargs),
                ttl=ttl,
                namespace=namespace,
            )

        return wrapper

    return decorator
