"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Every field has a default so the cache layer can start against a local
    Redis with no configuration. Range checks run in validate_ranges.
    """

    # App
    app_name: str = "lms-cache"
    app_version: str = "1.0.0"
    debug: bool = False

    # Redis connection
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    # None = auto: TLS on for managed hosts (e.g. *.upstash.io), off otherwise.
    redis_ssl: bool | None = None
    redis_max_connections: int = 10
    redis_socket_timeout: float = 5.0
    redis_connect_timeout: float = 5.0
    redis_retry_attempts: int = 3
    # Minimum seconds between reconnect attempts while Redis is unreachable.
    redis_reconnect_interval: float = 30.0

    # Cache behaviour
    cache_default_ttl: int = 300
    # Prepended to every key and pattern by CacheService ("" = none), e.g. "lms:".
    cache_key_prefix: str = ""
    cache_single_flight: bool = False
    cache_scan_batch_size: int = 500

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_ranges(self) -> "Settings":
        """Reject out-of-range Redis and cache values."""
        if not 0 < self.redis_port < 65536:
            raise ValueError(f"redis_port must be in 1..65535, got: {self.redis_port}")
        if self.redis_max_connections < 1:
            raise ValueError("redis_max_connections must be >= 1")
        if self.cache_default_ttl < 1:
            raise ValueError(
                f"cache_default_ttl must be a positive number of seconds, got: {self.cache_default_ttl}"
            )
        if self.cache_scan_batch_size < 1:
            raise ValueError("cache_scan_batch_size must be >= 1")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("telemetry_sample_rate must be between 0.0 and 1.0")
        return self

    @property
    def redis_use_ssl(self) -> bool:
        """Effective TLS flag; auto-enabled for Upstash hosts when redis_ssl is unset."""
        if self.redis_ssl is not None:
            return self.redis_ssl
        return "upstash.io" in self.redis_host


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
