"""Settings validation and derived Redis options."""

import pytest
from pydantic import ValidationError

from lms_cache.core.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.redis_host == "localhost"
    assert settings.cache_default_ttl == 300
    assert settings.cache_single_flight is False
    assert settings.cache_key_prefix == ""


def test_ssl_auto_enabled_for_upstash() -> None:
    assert Settings(_env_file=None, redis_host="eu1-x.upstash.io").redis_use_ssl is True
    assert Settings(_env_file=None, redis_host="localhost").redis_use_ssl is False
    assert Settings(_env_file=None, redis_host="localhost", redis_ssl=True).redis_use_ssl is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"redis_port": 0},
        {"cache_default_ttl": 0},
        {"cache_scan_batch_size": 0},
        {"redis_max_connections": 0},
        {"telemetry_sample_rate": 1.5},
    ],
)
def test_out_of_range_values_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_HOST", "cache.internal")
    monkeypatch.setenv("CACHE_DEFAULT_TTL", "120")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.redis_host == "cache.internal"
        assert settings.cache_default_ttl == 120
    finally:
        get_settings.cache_clear()
