from __future__ import annotations

import json

import pytest

from src.qr_attendance.qr_attendance.common.datetime_utils import to_epoch_millis
from src.qr_attendance.qr_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotEnrolled,
    NotFoundError,
    ValidationError,
)


def test_create_and_list_courses(course_service, admin):
    course_service.create_course(admin, code="CS301", name="Algorithms")
    assert [c.code for c in course_service.list_courses()] == ["CS101", "CS201", "CS301"]


def test_duplicate_course_code(course_service, admin):
    with pytest.raises(ConflictError):
        course_service.create_course(admin, code="CS101", name="Again")


def test_teacher_cannot_create_course(course_service, teacher):
    with pytest.raises(AuthorizationError):
        course_service.create_course(teacher, code="CS301", name="Algorithms")


def test_delete_course_strips_code_from_every_user(course_service, users, admin):
    removed = course_service.delete_course(admin, "CS101")

    assert removed == 2  # drsmith and alice
    assert "CS101" not in users.get_by_username("alice").courses
    assert "CS101" not in users.get_by_username("drsmith").courses
    assert course_service.list_courses()[0].code == "CS201"


def test_delete_unknown_course(course_service, admin):
    with pytest.raises(NotFoundError):
        course_service.delete_course(admin, "NOPE")


def test_scan_after_course_deleted_is_not_enrolled(course_service, attendance_service, admin, fixed_now):
    token = json.dumps({"courseId": "CS101", "expiry": to_epoch_millis(fixed_now) + 60_000})
    course_service.delete_course(admin, "CS101")

    with pytest.raises(NotEnrolled):
        attendance_service.record_attendance("alice", token, now=fixed_now)


def test_bulk_enroll_only_touches_students(course_service, users, admin):
    count = course_service.enroll_students(admin, "CS201", ["alice", "bob", "drsmith", "ghost"])

    assert count == 1  # bob already had it; drsmith is a teacher; ghost does not exist
    assert users.get_by_username("alice").courses == {"CS101", "CS201"}
    assert users.get_by_username("drsmith").courses == {"CS101", "CS201"}


def test_enroll_into_unknown_course(course_service, admin):
    with pytest.raises(NotFoundError):
        course_service.enroll_students(admin, "NOPE", ["alice"])


@pytest.mark.parametrize("usernames", [None, [], "alice", ["", "  "]])
def test_enroll_requires_usernames(course_service, admin, usernames):
    with pytest.raises(ValidationError):
        course_service.enroll_students(admin, "CS101", usernames)


def test_unenroll(course_service, users, admin):
    assert course_service.unenroll_students(admin, "CS101", ["alice"]) == 1
    assert users.get_by_username("alice").courses == frozenset()


def test_courses_for_teacher_keeps_unknown_codes(course_service, users, teacher):
    users.set_courses("drsmith", {"CS101", "LEGACY1"})
    courses = course_service.courses_for(teacher)
    assert [(c.code, c.name) for c in courses] == [("CS101", "Introduction to Programming"), ("LEGACY1", "LEGACY1")]
