"""TTL policy: named expiration tiers by data volatility.

Callers pick a tier; resolve_ttl turns a tier, an explicit number of
seconds, or None (default tier) into the seconds passed to SETEX.
"""

from enum import IntEnum


class TTLTier(IntEnum):
    """Expiration tiers in seconds, shortest first."""

    VERY_SHORT = 60  # rapidly changing counts (unread, enrollment count)
    SHORT = 300  # profiles and dynamic records
    MEDIUM = 600  # lessons, moderately stable collections
    LONG = 900  # detail views
    VERY_LONG = 3600  # near-static reference lists (wards)


DEFAULT_TTL_TIER = TTLTier.SHORT


def resolve_ttl(ttl: int | TTLTier | None, default: int = DEFAULT_TTL_TIER) -> int:
    """Return TTL in seconds for a tier, explicit seconds, or None (default).

    Args:
        ttl: TTLTier, positive number of seconds, or None.
        default: Seconds used when ttl is None.

    Returns:
        Positive number of seconds.

    Raises:
        ValueError: If ttl (or default) is not a positive integer.
    """
    seconds = default if ttl is None else ttl
    if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 1:
        raise ValueError(f"TTL must be a positive number of seconds, got: {seconds!r}")
    return int(seconds)
