"""Pytest configuration and fixtures for lms-cache.

Cache tests run against InMemoryRedis, a small async double for the
redis.asyncio commands CacheService uses, so no Redis server is needed.
Outage tests use AsyncMock clients whose commands raise redis errors.
"""

import math
import re
import time
from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis.asyncio as redis
from httpx import ASGITransport, AsyncClient

from lms_cache.core.config import Settings
from lms_cache.infrastructure.cache import (
    CacheInvalidator,
    CacheService,
    ReadThroughCache,
)
from lms_cache.main import create_app


def _glob_to_regex(pattern: str) -> str:
    """Translate a Redis glob (as in SCAN MATCH) to a regular expression.

    Follows Redis rules: "*", "?", "[...]" classes with "^" negation and
    "a-z" ranges, and a backslash makes the next character literal.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            i += 1
            negate = i < len(pattern) and pattern[i] == "^"
            if negate:
                i += 1
            members: list[str] = []
            while i < len(pattern) and pattern[i] != "]":
                if pattern[i] == "\\" and i + 1 < len(pattern):
                    i += 1
                    members.append(re.escape(pattern[i]))
                elif pattern[i] == "-" and members and i + 1 < len(pattern) and pattern[i + 1] != "]":
                    members.append("-")
                else:
                    members.append(re.escape(pattern[i]))
                i += 1
            out.append(f"[{'^' if negate else ''}{''.join(members)}]")
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


def redis_glob_match(key: str, pattern: str) -> bool:
    return re.fullmatch(_glob_to_regex(pattern), key, re.DOTALL) is not None


class InMemoryRedis:
    """Async stand-in for the subset of redis.asyncio.Redis used by CacheService.

    Values are str (decode_responses=True). Expiry uses time.monotonic();
    advance() moves the clock forward for TTL tests.
    """

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self._offset = 0.0
        self.hits = 0
        self.misses = 0
        self.closed = False

    def _now(self) -> float:
        return time.monotonic() + self._offset

    def advance(self, seconds: float) -> None:
        self._offset += seconds

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._now():
            del self._data[key]
            return None
        return entry

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        return entry[0]

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self._data[key] = (value, self._now() + seconds)
        return True

    async def set_raw(self, key: str, value: str) -> None:
        """Store without TTL (test helper, like a plain SET)."""
        self._data[key] = (value, None)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def unlink(self, *keys: str) -> int:
        return await self.delete(*keys)

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if self._live(key) is not None)

    async def expire(self, key: str, seconds: int) -> bool:
        entry = self._live(key)
        if entry is None:
            return False
        self._data[key] = (entry[0], self._now() + seconds)
        return True

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return math.ceil(entry[1] - self._now())

    async def scan_iter(self, match: str | None = None, count: int | None = None) -> AsyncIterator[str]:
        for key in list(self._data):
            if self._live(key) is None:
                continue
            if match is None or redis_glob_match(key, match):
                yield key

    async def flushdb(self) -> bool:
        self._data.clear()
        return True

    async def info(self, section: str | None = None) -> dict[str, Any]:
        return {"keyspace_hits": self.hits, "keyspace_misses": self.misses}

    async def dbsize(self) -> int:
        return sum(1 for key in list(self._data) if self._live(key) is not None)

    async def aclose(self) -> None:
        self.closed = True


def make_failing_redis() -> AsyncMock:
    """Client that answers PING, then fails every command with ConnectionError."""
    client = AsyncMock()
    client.ping = AsyncMock(return_value=True)
    down = redis.ConnectionError("Connection refused")
    for name in ("get", "setex", "delete", "unlink", "exists", "expire", "ttl", "flushdb", "info", "dbsize"):
        setattr(client, name, AsyncMock(side_effect=down))
    client.scan_iter = MagicMock(side_effect=down)
    return client


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no .env)."""
    return Settings(_env_file=None)


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
async def cache(fake_redis: InMemoryRedis, settings: Settings) -> CacheService:
    """Connected CacheService over InMemoryRedis."""
    service = CacheService(redis_client=fake_redis, settings=settings)
    await service.connect()
    return service


@pytest.fixture
async def failing_cache(settings: Settings) -> CacheService:
    """Connected CacheService whose backing store fails every command."""
    service = CacheService(redis_client=make_failing_redis(), settings=settings)
    await service.connect()
    return service


@pytest.fixture
def read_through(cache: CacheService) -> ReadThroughCache:
    return ReadThroughCache(cache)


@pytest.fixture
def invalidator(cache: CacheService) -> CacheInvalidator:
    return CacheInvalidator(cache)


@pytest.fixture
async def client(cache: CacheService) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against an app wired to the in-memory cache (ASGI)."""
    app = create_app(cache=cache)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
