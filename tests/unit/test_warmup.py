"""CacheWarmer: registered entries are loaded once, failures are counted not raised."""

from lms_cache.infrastructure.cache import CacheService, CacheWarmer, ReadThroughCache, TTLTier
from lms_cache.infrastructure.cache.keys import class_list_key, ward_list_key


async def test_warm_up_populates_registered_keys(read_through: ReadThroughCache, cache: CacheService) -> None:
    warmer = CacheWarmer()
    warmer.register(ward_list_key(), lambda: ["w1", "w2"], ttl=TTLTier.VERY_LONG)
    warmer.register(class_list_key(), lambda: ["c1"])

    report = await warmer.warm_up(read_through)

    assert (report.warmed, report.failed) == (2, 0)
    assert await cache.get(ward_list_key()) == ["w1", "w2"]
    assert await cache.get(class_list_key()) == ["c1"]


async def test_warm_up_skips_already_cached(read_through: ReadThroughCache, cache: CacheService) -> None:
    await cache.set(ward_list_key(), ["cached"])
    calls = []
    warmer = CacheWarmer()
    warmer.register(ward_list_key(), lambda: calls.append(1) or ["fresh"])

    await warmer.warm_up(read_through)

    assert calls == []
    assert await cache.get(ward_list_key()) == ["cached"]


async def test_warm_up_counts_failures(read_through: ReadThroughCache) -> None:
    async def broken() -> list:
        raise ConnectionRefusedError("database unavailable")

    warmer = CacheWarmer()
    warmer.register("class:list", broken)
    warmer.register("ward:list", lambda: [])

    report = await warmer.warm_up(read_through)

    assert (report.warmed, report.failed) == (1, 1)
