"""Cache invalidation: key and pattern deletion plus per-entity recipes.

A recipe lists every key and glob pattern derived for one entity (user,
class, student). Entity services call the matching invalidate_* method after
a successful write to the system of record. When a new cached key family is
added for an entity, its recipe below must be extended as well.

All deletions of one recipe run concurrently; the call returns after every
one was attempted. Store errors are already absorbed by CacheService (0
removed), so one failing deletion never blocks the rest.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from lms_cache.infrastructure.cache import keys
from lms_cache.infrastructure.cache.cache_protocol import CacheProtocol
from lms_cache.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationRecipe:
    """Fixed set of keys and glob patterns depending on one entity."""

    entity: str
    entity_id: str
    keys: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class InvalidationResult:
    """Outcome of applying a recipe: counts actually removed."""

    entity: str
    entity_id: str
    keys_removed: int = 0
    pattern_removed: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.keys_removed + sum(self.pattern_removed.values())


def user_recipe(user_id: str) -> InvalidationRecipe:
    """Profile/basic keys, conversation list, unread count, and every thread of the user."""
    return InvalidationRecipe(
        entity="user",
        entity_id=user_id,
        keys=(
            keys.user_key(user_id),
            keys.user_profile_key(user_id),
            keys.conversations_key(user_id),
            keys.unread_count_key(user_id),
        ),
        patterns=keys.thread_patterns(user_id),
    )


def class_recipe(class_id: str) -> InvalidationRecipe:
    """Per-class derived keys plus the global class list."""
    return InvalidationRecipe(
        entity="class",
        entity_id=class_id,
        keys=(
            keys.class_key(class_id),
            keys.class_list_key(),
            keys.class_members_key(class_id),
            keys.class_lessons_key(class_id),
            keys.class_enrollments_key(class_id),
            keys.class_enrollment_count_key(class_id),
            keys.lessons_by_class_key(class_id),
            keys.class_messages_key(class_id),
            keys.class_grades_key(class_id),
        ),
    )


def student_recipe(student_id: str) -> InvalidationRecipe:
    """Grade and enrollment keys plus all class-scoped grade keys of the student."""
    return InvalidationRecipe(
        entity="student",
        entity_id=student_id,
        keys=(
            keys.student_grades_key(student_id),
            keys.student_enrollments_key(student_id),
        ),
        patterns=(keys.student_class_grades_pattern(student_id),),
    )


class CacheInvalidator:
    """Deletes cached entries explicitly, by pattern, or by entity recipe."""

    def __init__(self, cache: CacheProtocol) -> None:
        self.cache = cache

    async def delete_keys(self, *cache_keys: str | Iterable[str]) -> int:
        """Delete the given keys; returns number removed."""
        return await self.cache.delete(*cache_keys)

    async def delete_by_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob (SCAN-based, maintenance grade)."""
        return await self.cache.delete_pattern(pattern)

    @traced("cache.invalidate")
    async def apply(self, recipe: InvalidationRecipe) -> InvalidationResult:
        """Run the recipe's key delete and pattern deletes concurrently."""
        outcomes = await asyncio.gather(
            self.cache.delete(recipe.keys),
            *(self.cache.delete_pattern(p) for p in recipe.patterns),
            return_exceptions=True,
        )
        counts: list[int] = []
        targets = ["keys", *recipe.patterns]
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Cache invalidation of %s for %s %s failed",
                    target,
                    recipe.entity,
                    recipe.entity_id,
                    exc_info=outcome,
                )
                counts.append(0)
            else:
                counts.append(int(outcome))
        result = InvalidationResult(
            entity=recipe.entity,
            entity_id=recipe.entity_id,
            keys_removed=counts[0],
            pattern_removed=dict(zip(recipe.patterns, counts[1:])),
        )
        add_span_attributes(cache_entity=recipe.entity, cache_removed=result.total)
        logger.info(
            "Cache invalidated %s %s: %s key(s) removed",
            recipe.entity,
            recipe.entity_id,
            result.total,
        )
        return result

    async def invalidate_user(self, user_id: str) -> InvalidationResult:
        return await self.apply(user_recipe(user_id))

    async def invalidate_class(self, class_id: str) -> InvalidationResult:
        return await self.apply(class_recipe(class_id))

    async def invalidate_student(self, student_id: str) -> InvalidationResult:
        return await self.apply(student_recipe(student_id))

    async def invalidate_thread(self, user_id: str, partner_id: str) -> int:
        """Delete the single canonical thread entry between two users."""
        return await self.cache.delete(keys.thread_key(user_id, partner_id))
