"""Cache key builders. Single place for key format.

Key components (user_id, class_id, etc.) must be non-empty and must not
contain CACHE_KEY_SEP to avoid ambiguous or colliding keys. Invalid
components are rejected before a key is composed.

Two-party relations (message threads) sort their identifiers first so
thread_key(a, b) == thread_key(b, a).
"""

from lms_cache.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_CLASS,
    CACHE_PREFIX_CONVERSATIONS,
    CACHE_PREFIX_ENROLLMENT,
    CACHE_PREFIX_ENROLLMENTS,
    CACHE_PREFIX_GRADES,
    CACHE_PREFIX_LESSON,
    CACHE_PREFIX_LESSONS,
    CACHE_PREFIX_MESSAGES,
    CACHE_PREFIX_THREAD,
    CACHE_PREFIX_UNREAD,
    CACHE_PREFIX_USER,
    CACHE_PREFIX_WARD,
    CACHE_SCOPE_CLASS,
    CACHE_SCOPE_STUDENT,
    CACHE_SUB_COUNT,
    CACHE_SUB_ENROLLMENTS,
    CACHE_SUB_LESSONS,
    CACHE_SUB_LIST,
    CACHE_SUB_MEMBERS,
    CACHE_SUB_PROFILE,
)
from lms_cache.domain.exceptions import InvalidCacheKeyError

_GLOB_SPECIAL = frozenset("*?[]\\^")


def _validate_key_component(value: str, name: str) -> None:
    """Raise InvalidCacheKeyError if value is empty or contains the separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        InvalidCacheKeyError: If value is empty/not a string or contains CACHE_KEY_SEP.
    """
    if not isinstance(value, str) or not value:
        raise InvalidCacheKeyError(name, "must be a non-empty string")
    if CACHE_KEY_SEP in value:
        raise InvalidCacheKeyError(name, f"must not contain separator {CACHE_KEY_SEP!r}")


def _validate_key_components(components: list[tuple[str, str]]) -> None:
    """Validate multiple key components; raise on first invalid one."""
    for value, name in components:
        _validate_key_component(value, name)


def _join(*parts: str) -> str:
    return CACHE_KEY_SEP.join(parts)


def escape_glob(value: str) -> str:
    """Backslash-escape Redis glob metacharacters so value matches only itself."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in value)


# ---- Generic builders ----


def build_key(kind: str, entity_id: str, *sub: str) -> str:
    """Compose "{kind}:{id}" or "{kind}:{id}:{sub...}".

    Sub-resource segments are fixed names chosen by the caller; they may
    themselves be multi-segment (e.g. "enrollment", "count").
    """
    _validate_key_components([(kind, "kind"), (entity_id, "entity_id")])
    for segment in sub:
        _validate_key_component(segment, "sub")
    return _join(kind, entity_id, *sub)


def symmetric_key(kind: str, first_id: str, second_id: str) -> str:
    """Key for an order-independent two-party relation: "{kind}:{min}:{max}"."""
    _validate_key_components(
        [(kind, "kind"), (first_id, "first_id"), (second_id, "second_id")]
    )
    low, high = sorted((first_id, second_id))
    return _join(kind, low, high)


# ---- User ----


def user_key(user_id: str) -> str:
    """Cache key for basic user record."""
    return build_key(CACHE_PREFIX_USER, user_id)


def user_profile_key(user_id: str) -> str:
    """Cache key for user profile view."""
    return build_key(CACHE_PREFIX_USER, user_id, CACHE_SUB_PROFILE)


def conversations_key(user_id: str) -> str:
    """Cache key for a user's conversation list."""
    return build_key(CACHE_PREFIX_CONVERSATIONS, user_id)


def unread_count_key(user_id: str) -> str:
    """Cache key for a user's unread message count."""
    return build_key(CACHE_PREFIX_UNREAD, user_id)


# ---- Class ----


def class_key(class_id: str) -> str:
    """Cache key for class detail."""
    return build_key(CACHE_PREFIX_CLASS, class_id)


def class_list_key() -> str:
    """Cache key for the global class list."""
    return _join(CACHE_PREFIX_CLASS, CACHE_SUB_LIST)


def class_members_key(class_id: str) -> str:
    return build_key(CACHE_PREFIX_CLASS, class_id, CACHE_SUB_MEMBERS)


def class_lessons_key(class_id: str) -> str:
    return build_key(CACHE_PREFIX_CLASS, class_id, CACHE_SUB_LESSONS)


def class_enrollments_key(class_id: str) -> str:
    return build_key(CACHE_PREFIX_CLASS, class_id, CACHE_SUB_ENROLLMENTS)


def class_enrollment_count_key(class_id: str) -> str:
    """Cache key for a class's enrollment count ("class:{id}:enrollment:count")."""
    return build_key(CACHE_PREFIX_CLASS, class_id, CACHE_PREFIX_ENROLLMENT, CACHE_SUB_COUNT)


# ---- Lesson ----


def lesson_key(lesson_id: str) -> str:
    return build_key(CACHE_PREFIX_LESSON, lesson_id)


def lessons_by_class_key(class_id: str) -> str:
    """Cache key for lessons listed by class ("lessons:class:{id}")."""
    _validate_key_component(class_id, "class_id")
    return _join(CACHE_PREFIX_LESSONS, CACHE_SCOPE_CLASS, class_id)


# ---- Messages ----


def thread_key(user_id: str, partner_id: str) -> str:
    """Cache key for the message thread between two users, order-independent."""
    return symmetric_key(CACHE_PREFIX_THREAD, user_id, partner_id)


def thread_patterns(user_id: str) -> tuple[str, str]:
    """Glob patterns matching every thread the user takes part in.

    Sorting puts the user in either position, so both are needed.
    """
    _validate_key_component(user_id, "user_id")
    escaped = escape_glob(user_id)
    return (
        _join(CACHE_PREFIX_THREAD, escaped, "*"),
        _join(CACHE_PREFIX_THREAD, "*", escaped),
    )


def class_messages_key(class_id: str) -> str:
    """Cache key for a class's message board ("messages:class:{id}")."""
    _validate_key_component(class_id, "class_id")
    return _join(CACHE_PREFIX_MESSAGES, CACHE_SCOPE_CLASS, class_id)


# ---- Grades ----


def student_grades_key(student_id: str, class_id: str | None = None) -> str:
    """Cache key for a student's grades, optionally scoped to one class.

    "grades:student:{id}" or "grades:student:{id}:class:{class_id}".
    """
    _validate_key_component(student_id, "student_id")
    if class_id is None:
        return _join(CACHE_PREFIX_GRADES, CACHE_SCOPE_STUDENT, student_id)
    _validate_key_component(class_id, "class_id")
    return _join(
        CACHE_PREFIX_GRADES, CACHE_SCOPE_STUDENT, student_id, CACHE_SCOPE_CLASS, class_id
    )


def student_class_grades_pattern(student_id: str) -> str:
    """Glob pattern matching every class-scoped grade key of a student."""
    _validate_key_component(student_id, "student_id")
    return _join(
        CACHE_PREFIX_GRADES, CACHE_SCOPE_STUDENT, escape_glob(student_id), CACHE_SCOPE_CLASS, "*"
    )


def class_grades_key(class_id: str) -> str:
    _validate_key_component(class_id, "class_id")
    return _join(CACHE_PREFIX_GRADES, CACHE_SCOPE_CLASS, class_id)


# ---- Wards ----


def ward_list_key() -> str:
    return _join(CACHE_PREFIX_WARD, CACHE_SUB_LIST)


def ward_key(ward_id: str) -> str:
    return build_key(CACHE_PREFIX_WARD, ward_id)


# ---- Enrollments ----


def student_enrollments_key(student_id: str) -> str:
    """Cache key for a student's enrollments ("enrollments:student:{id}")."""
    _validate_key_component(student_id, "student_id")
    return _join(CACHE_PREFIX_ENROLLMENTS, CACHE_SCOPE_STUDENT, student_id)


def enrollment_key(enrollment_id: str) -> str:
    return build_key(CACHE_PREFIX_ENROLLMENT, enrollment_id)
