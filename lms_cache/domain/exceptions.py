"""Domain exceptions for the cache layer.

Only caller contract violations are raised to callers. Backing-store
failures never surface as exceptions; CacheService converts them to the
empty result of each operation.
"""

from typing import Any


class LmsCacheException(Exception):
    """Base exception for all lms-cache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, key).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LmsCacheException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidCacheKeyError(ValidationException):
    """Identifier cannot be used as a cache key component (empty or contains separator)."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid cache key component {field!r}: {reason}", field)


class CacheSerializationError(LmsCacheException):
    """Value could not be encoded, or a stored payload could not be decoded/validated.

    Internal to the cache layer: get() treats it as a miss, set() as a failed write.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        details = {"key": key} if key else {}
        super().__init__(message, "CACHE_SERIALIZATION_ERROR", details)
