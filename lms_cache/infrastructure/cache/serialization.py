"""Value serialization contract for cache payloads.

Values are stored as JSON. Pydantic models, datetimes and UUIDs are encoded
with pydantic's to_jsonable_python. A CacheNamespace declares the value shape
of one key family; payloads read under a namespace are validated and a
mismatch is reported as CacheSerializationError (the access layer treats it
as a miss).
"""

from __future__ import annotations

import json
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from lms_cache.domain.exceptions import CacheSerializationError

T = TypeVar("T")


class CacheNamespace(Generic[T]):
    """Declared value shape for one key family (e.g. "user" -> UserProfile).

    Example:
        USER_PROFILES = CacheNamespace("user:profile", UserProfile)
        profile = await cache.get(user_profile_key(uid), namespace=USER_PROFILES)
    """

    def __init__(self, name: str, shape: type[T] | Any) -> None:
        self.name = name
        self.adapter: TypeAdapter[T] = TypeAdapter(shape)

    def validate(self, data: Any) -> T:
        """Validate decoded JSON against the declared shape."""
        return self.adapter.validate_python(data)

    def __repr__(self) -> str:
        return f"CacheNamespace({self.name!r})"


def dumps(value: Any, key: str | None = None) -> str:
    """Encode value as JSON.

    Raises:
        CacheSerializationError: If value is not JSON-encodable.
    """
    try:
        return json.dumps(value, default=to_jsonable_python)
    except (TypeError, ValueError) as e:
        raise CacheSerializationError(f"Cannot serialize cache value: {e}", key) from e


def loads(
    raw: str | bytes,
    namespace: CacheNamespace[T] | None = None,
    key: str | None = None,
) -> T | Any:
    """Decode a stored payload, validating against namespace when given.

    Raises:
        CacheSerializationError: On malformed JSON or shape mismatch.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise CacheSerializationError(f"Malformed cache payload: {e}", key) from e
    if namespace is None:
        return data
    try:
        return namespace.validate(data)
    except ValidationError as e:
        raise CacheSerializationError(
            f"Cache payload does not match {namespace.name!r}: {e.error_count()} error(s)",
            key,
        ) from e
