"""Tests for TTL tiers and resolve_ttl."""

import pytest

from lms_cache.infrastructure.cache.ttl import DEFAULT_TTL_TIER, TTLTier, resolve_ttl


def test_tiers_increase_in_duration() -> None:
    ordered = [TTLTier.VERY_SHORT, TTLTier.SHORT, TTLTier.MEDIUM, TTLTier.LONG, TTLTier.VERY_LONG]
    assert [int(t) for t in ordered] == [60, 300, 600, 900, 3600]


def test_default_tier_is_short() -> None:
    assert DEFAULT_TTL_TIER is TTLTier.SHORT
    assert resolve_ttl(None) == 300


def test_tier_resolves_to_seconds() -> None:
    assert resolve_ttl(TTLTier.VERY_LONG) == 3600
    assert type(resolve_ttl(TTLTier.LONG)) is int


def test_explicit_seconds_pass_through() -> None:
    assert resolve_ttl(42) == 42


def test_configured_default_used_for_none() -> None:
    assert resolve_ttl(None, default=120) == 120


@pytest.mark.parametrize("bad", [0, -5, 1.5, "300", True])
def test_invalid_ttl_rejected(bad: object) -> None:
    with pytest.raises(ValueError, match="positive"):
        resolve_ttl(bad)  # type: ignore[arg-type]
