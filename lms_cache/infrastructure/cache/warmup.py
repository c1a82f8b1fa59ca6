"""Cache warm-up: pre-populate frequently read keys at startup."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from lms_cache.infrastructure.cache.read_through import Producer, ReadThroughCache
from lms_cache.infrastructure.cache.ttl import TTLTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WarmupEntry:
    key: str
    producer: Producer[Any]
    ttl: int | TTLTier | None = None


@dataclass(frozen=True)
class WarmupReport:
    warmed: int
    failed: int


class CacheWarmer:
    """Registry of (key, producer, ttl) entries loaded through ReadThroughCache.

    Keys already cached are left untouched (the producer is not called).
    A failing producer is logged and counted; warm-up never raises for it.
    """

    def __init__(self) -> None:
        self._entries: list[WarmupEntry] = []

    def register(
        self, key: str, producer: Producer[Any], ttl: int | TTLTier | None = None
    ) -> None:
        self._entries.append(WarmupEntry(key=key, producer=producer, ttl=ttl))

    @property
    def entries(self) -> tuple[WarmupEntry, ...]:
        return tuple(self._entries)

    async def _warm(self, read_through: ReadThroughCache, entry: WarmupEntry) -> bool:
        try:
            await read_through.get_or_compute(entry.key, entry.producer, ttl=entry.ttl)
        except Exception:
            logger.exception("Cache warm-up failed for key %s", entry.key)
            return False
        return True

    async def warm_up(self, read_through: ReadThroughCache) -> WarmupReport:
        """Load every registered entry concurrently through read_through."""
        logger.info("Cache warm-up started (%s entries)", len(self._entries))
        results = await asyncio.gather(*(self._warm(read_through, e) for e in self._entries))
        report = WarmupReport(warmed=sum(results), failed=len(results) - sum(results))
        logger.info(
            "Cache warm-up completed: %s warmed, %s failed", report.warmed, report.failed
        )
        return report
