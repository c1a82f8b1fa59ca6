"""Tests for cache payload encoding and namespace validation."""

from datetime import UTC, datetime

import pytest
from pydantic import BaseModel

from lms_cache.domain.exceptions import CacheSerializationError
from lms_cache.infrastructure.cache.serialization import CacheNamespace, dumps, loads


class UserProfile(BaseModel):
    id: str
    name: str
    enrolled_at: datetime | None = None


USER_PROFILES = CacheNamespace("user:profile", UserProfile)


def test_pydantic_model_and_datetime_encoded() -> None:
    profile = UserProfile(id="u1", name="Ada", enrolled_at=datetime(2024, 1, 2, tzinfo=UTC))
    raw = dumps(profile)
    assert '"enrolled_at": "2024-01-02T00:00:00Z"' in raw


def test_namespace_validates_into_declared_shape() -> None:
    profile = loads('{"id": "u1", "name": "Ada"}', USER_PROFILES)
    assert isinstance(profile, UserProfile)
    assert profile.name == "Ada"


def test_namespace_mismatch_raises() -> None:
    with pytest.raises(CacheSerializationError, match="user:profile"):
        loads('{"id": "u1"}', USER_PROFILES, key="user:u1:profile")


def test_malformed_json_raises() -> None:
    with pytest.raises(CacheSerializationError) as exc_info:
        loads("{not json", key="user:u1")
    assert exc_info.value.details == {"key": "user:u1"}


def test_unserializable_value_raises() -> None:
    with pytest.raises(CacheSerializationError):
        dumps(object())


def test_generic_shape_namespace() -> None:
    counts = CacheNamespace("unread", int)
    assert loads("7", counts) == 7
    with pytest.raises(CacheSerializationError):
        loads('"seven"', counts)
