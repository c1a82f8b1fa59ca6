"""Maintenance commands for the Redis cache.

Usage:
    uv run python -m scripts.cache_admin stats
    uv run python -m scripts.cache_admin flush
    uv run python -m scripts.cache_admin invalidate-user <user_id>
    uv run python -m scripts.cache_admin invalidate-class <class_id>
    uv run python -m scripts.cache_admin invalidate-student <student_id>
    uv run python -m scripts.cache_admin delete-pattern <glob>
Uses REDIS_* settings from the environment or .env. Pattern deletion scans
the keyspace; run it off-peak for broad patterns.
"""

import asyncio
import sys

from lms_cache.infrastructure.cache import CacheInvalidator, CacheService
from lms_cache.shared.telemetry.logging import setup_logging

_USAGE = (
    "Usage: uv run python -m scripts.cache_admin "
    "{stats|flush|invalidate-user|invalidate-class|invalidate-student|delete-pattern} [arg]"
)
_NEEDS_ARG = {"invalidate-user", "invalidate-class", "invalidate-student", "delete-pattern"}


async def main() -> None:
    """Run one maintenance command against the configured Redis."""
    if len(sys.argv) < 2:
        print(_USAGE, file=sys.stderr)
        sys.exit(1)
    command = sys.argv[1]
    if command in _NEEDS_ARG and len(sys.argv) < 3:
        print(f"{command} requires an argument\n{_USAGE}", file=sys.stderr)
        sys.exit(1)
    if command not in _NEEDS_ARG | {"stats", "flush"}:
        print(f"Unknown command: {command}\n{_USAGE}", file=sys.stderr)
        sys.exit(1)

    setup_logging()
    cache = CacheService()
    await cache.connect()
    if not cache.is_available():
        print("Redis unreachable; check REDIS_HOST/REDIS_PORT", file=sys.stderr)
        sys.exit(1)
    invalidator = CacheInvalidator(cache)
    try:
        if command == "stats":
            stats = await cache.stats()
            print(stats.model_dump_json(indent=2) if stats else "Stats unavailable")
        elif command == "flush":
            print("Flushed" if await cache.flush() else "Flush failed")
        elif command == "invalidate-user":
            result = await invalidator.invalidate_user(sys.argv[2])
            print(f"User {result.entity_id}: removed {result.total} key(s)")
        elif command == "invalidate-class":
            result = await invalidator.invalidate_class(sys.argv[2])
            print(f"Class {result.entity_id}: removed {result.total} key(s)")
        elif command == "invalidate-student":
            result = await invalidator.invalidate_student(sys.argv[2])
            print(f"Student {result.entity_id}: removed {result.total} key(s)")
        else:
            removed = await invalidator.delete_by_pattern(sys.argv[2])
            print(f"Pattern {sys.argv[2]}: removed {removed} key(s)")
    finally:
        await cache.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
