"""Tests for cache key builders (format, symmetric threads, component validation)."""

import fnmatch

import pytest

from lms_cache.domain.exceptions import InvalidCacheKeyError
from lms_cache.infrastructure.cache import keys


class TestBuildKey:
    def test_single_entity(self) -> None:
        assert keys.build_key("class", "c1") == "class:c1"

    def test_with_sub_resource(self) -> None:
        assert keys.build_key("user", "u1", "profile") == "user:u1:profile"

    def test_multi_segment_sub_resource(self) -> None:
        assert keys.build_key("class", "c1", "enrollment", "count") == "class:c1:enrollment:count"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(InvalidCacheKeyError) as exc_info:
            keys.build_key("class", "")
        assert exc_info.value.details == {"field": "entity_id"}
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    def test_none_id_rejected(self) -> None:
        with pytest.raises(InvalidCacheKeyError):
            keys.build_key("class", None)  # type: ignore[arg-type]

    def test_separator_in_id_rejected(self) -> None:
        with pytest.raises(InvalidCacheKeyError, match="separator"):
            keys.build_key("class", "c1:lessons")


class TestSymmetricKeys:
    """Thread keys sort both identifiers so either party resolves the same entry."""

    @pytest.mark.parametrize(
        ("a", "b"),
        [("u1", "u2"), ("u2", "u1"), ("alice", "bob"), ("same", "same"), ("10", "9")],
    )
    def test_order_independent(self, a: str, b: str) -> None:
        assert keys.thread_key(a, b) == keys.thread_key(b, a)

    def test_sorted_composition(self) -> None:
        assert keys.thread_key("u2", "u1") == "thread:u1:u2"

    def test_lexicographic_not_numeric(self) -> None:
        assert keys.thread_key("9", "10") == "thread:10:9"

    def test_generic_symmetric_key(self) -> None:
        assert keys.symmetric_key("pair", "b", "a") == "pair:a:b"

    def test_empty_participant_rejected(self) -> None:
        with pytest.raises(InvalidCacheKeyError):
            keys.thread_key("u1", "")


class TestEntityCatalogue:
    def test_user_keys(self) -> None:
        assert keys.user_key("u1") == "user:u1"
        assert keys.user_profile_key("u1") == "user:u1:profile"
        assert keys.conversations_key("u1") == "conversations:u1"
        assert keys.unread_count_key("u1") == "unread:u1"

    def test_class_keys(self) -> None:
        assert keys.class_key("c1") == "class:c1"
        assert keys.class_list_key() == "class:list"
        assert keys.class_members_key("c1") == "class:c1:members"
        assert keys.class_lessons_key("c1") == "class:c1:lessons"
        assert keys.class_enrollments_key("c1") == "class:c1:enrollments"
        assert keys.class_enrollment_count_key("c1") == "class:c1:enrollment:count"

    def test_lesson_and_message_keys(self) -> None:
        assert keys.lesson_key("l1") == "lesson:l1"
        assert keys.lessons_by_class_key("c1") == "lessons:class:c1"
        assert keys.class_messages_key("c1") == "messages:class:c1"

    def test_grade_keys(self) -> None:
        assert keys.student_grades_key("s1") == "grades:student:s1"
        assert keys.student_grades_key("s1", "c1") == "grades:student:s1:class:c1"
        assert keys.class_grades_key("c1") == "grades:class:c1"

    def test_ward_and_enrollment_keys(self) -> None:
        assert keys.ward_list_key() == "ward:list"
        assert keys.ward_key("w1") == "ward:w1"
        assert keys.student_enrollments_key("s1") == "enrollments:student:s1"
        assert keys.enrollment_key("e1") == "enrollment:e1"


class TestPatterns:
    def test_thread_patterns_cover_both_positions(self) -> None:
        first, second = keys.thread_patterns("u5")
        assert fnmatch.fnmatchcase(keys.thread_key("u5", "u9"), first)
        assert fnmatch.fnmatchcase(keys.thread_key("u5", "u1"), second)

    def test_student_class_grades_pattern(self) -> None:
        pattern = keys.student_class_grades_pattern("s1")
        assert pattern == "grades:student:s1:class:*"
        assert fnmatch.fnmatchcase(keys.student_grades_key("s1", "c7"), pattern)
        assert not fnmatch.fnmatchcase(keys.student_grades_key("s10", "c7"), pattern)

    def test_glob_metacharacters_escaped(self) -> None:
        assert keys.escape_glob("a*b?[c]") == "a\\*b\\?\\[c\\]"
        assert keys.thread_patterns("u*")[0] == "thread:u\\*:*"
