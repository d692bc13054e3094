from __future__ import annotations

from datetime import date, datetime

import pytest

from src.qr_attendance.qr_attendance.core.enums import AttendanceStatus
from src.qr_attendance.qr_attendance.core.exceptions import AuthorizationError, ValidationError


def _mark(attendance, student, course, when: datetime):
    attendance.create_mark(
        student_username=student,
        course_code=course,
        mark_date=when.date(),
        marked_at=when,
        status=AttendanceStatus.PRESENT,
    )


@pytest.fixture
def history(attendance):
    _mark(attendance, "alice", "CS101", datetime(2026, 1, 31, 9, 5))
    _mark(attendance, "alice", "CS101", datetime(2026, 2, 2, 9, 5))
    _mark(attendance, "bob", "CS201", datetime(2026, 2, 2, 10, 0))
    _mark(attendance, "alice", "CS101", datetime(2026, 2, 28, 9, 5))
    return attendance


def test_month_is_one_based(attendance_service, admin, history):
    marks = attendance_service.list_month(admin, month=2, year=2026)
    assert [m.mark_date for m in marks] == [date(2026, 2, 28), date(2026, 2, 2), date(2026, 2, 2)]


def test_student_month_is_scoped_to_self(attendance_service, alice, history):
    marks = attendance_service.list_month(alice, month="2", year="2026")
    assert {m.student_username for m in marks} == {"alice"}
    assert len(marks) == 2


def test_student_cannot_read_someone_else(attendance_service, alice, history):
    with pytest.raises(AuthorizationError):
        attendance_service.list_month(alice, month=2, year=2026, student="bob")


def test_teacher_filters_by_student_and_course(attendance_service, teacher, history):
    assert len(attendance_service.list_month(teacher, month=2, year=2026, student="bob")) == 1
    assert len(attendance_service.list_month(teacher, month=2, year=2026, course="CS101")) == 2


@pytest.mark.parametrize("month", [0, 13, "feb", None])
def test_invalid_month(attendance_service, admin, month):
    with pytest.raises(ValidationError):
        attendance_service.list_month(admin, month=month, year=2026)


def test_today_lists_only_today(attendance_service, alice, history, fixed_now):
    marks = attendance_service.list_today(alice, now=fixed_now)
    assert [(m.course_code, m.mark_date) for m in marks] == [("CS101", date(2026, 2, 2))]


def test_today_by_course_marks_absent_courses(attendance_service, users, alice, history, fixed_now):
    users.set_courses("alice", {"CS101", "CS201"})
    rows = {r.course_code: r.to_dict() for r in attendance_service.today_by_course(alice, now=fixed_now)}
    assert rows["CS101"]["status"] == "Present"
    assert rows["CS201"]["status"] == "Absent"
    assert rows["CS201"]["timestamp"] is None


def test_export_rows_include_course_name(attendance_service, teacher, history):
    rows = attendance_service.export_rows(teacher, month=2, year=2026, course="CS201")
    assert rows == [
        {
            "date": "2026-02-02",
            "studentId": "bob",
            "courseId": "CS201",
            "courseName": "Data Structures",
            "timestamp": "2026-02-02 10:00:00",
            "status": "present",
        }
    ]


def test_students_cannot_export(attendance_service, alice, history):
    with pytest.raises(AuthorizationError):
        attendance_service.export_rows(alice, month=2, year=2026)
