from __future__ import annotations

import io
import json
from datetime import date, timedelta

import pytest

from src.qr_attendance.qr_attendance.attendance.service import AttendanceService
from src.qr_attendance.qr_attendance.common.datetime_utils import to_epoch_millis
from src.qr_attendance.qr_attendance.core.enums import AttendanceStatus
from src.qr_attendance.qr_attendance.core.exceptions import (
    AlreadyMarked,
    AuthorizationError,
    MalformedToken,
    NotEnrolled,
    TokenExpired,
)
from src.qr_attendance.qr_attendance.sessions.qr_image import render_png


def _token(course_id: str, expiry_ms: int) -> str:
    return json.dumps({"courseId": course_id, "teacherId": "drsmith", "teacherName": "Dr Smith", "expiry": expiry_ms})


def test_valid_scan_writes_mark_with_server_date(attendance_service, attendance, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now) + 60_000)

    mark = attendance_service.record_attendance("alice", token, now=fixed_now)

    assert mark.student_username == "alice"
    assert mark.course_code == "CS101"
    assert mark.mark_date == fixed_now.date()
    assert mark.status == AttendanceStatus.PRESENT
    assert attendance.get_mark(student_username="alice", course_code="CS101", mark_date=fixed_now.date())


def test_token_valid_at_exact_expiry(attendance_service, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now))
    assert attendance_service.record_attendance("alice", token, now=fixed_now)


def test_token_valid_one_millisecond_before_expiry(attendance_service, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now) + 1)
    assert attendance_service.record_attendance("alice", token, now=fixed_now)


def test_token_expired_one_millisecond_later(attendance_service, attendance, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now) - 1)
    with pytest.raises(TokenExpired):
        attendance_service.record_attendance("alice", token, now=fixed_now)
    assert attendance.by_key == {}


def test_not_enrolled(attendance_service, fixed_now):
    token = _token("CS201", to_epoch_millis(fixed_now) + 60_000)
    with pytest.raises(NotEnrolled):
        attendance_service.record_attendance("alice", token, now=fixed_now)


def test_unknown_student_is_not_enrolled(attendance_service, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now) + 60_000)
    with pytest.raises(NotEnrolled):
        attendance_service.record_attendance("ghost", token, now=fixed_now)


def test_expiry_checked_before_enrollment(attendance_service, fixed_now):
    token = _token("CS201", to_epoch_millis(fixed_now) - 1)
    with pytest.raises(TokenExpired):
        attendance_service.record_attendance("alice", token, now=fixed_now)


def test_malformed_token(attendance_service, fixed_now):
    with pytest.raises(MalformedToken):
        attendance_service.record_attendance("alice", "hello", now=fixed_now)


def test_second_scan_same_day_is_already_marked(attendance_service, attendance, fixed_now):
    token = _token("CS101", to_epoch_millis(fixed_now) + 15 * 60_000)
    attendance_service.record_attendance("alice", token, now=fixed_now)

    with pytest.raises(AlreadyMarked) as exc:
        attendance_service.record_attendance("alice", token, now=fixed_now + timedelta(minutes=1))
    assert exc.value.reason == "ALREADY_MARKED"
    assert len(attendance.by_key) == 1


def test_next_day_scan_creates_new_mark(attendance_service, attendance, fixed_now):
    tomorrow = fixed_now + timedelta(days=1)
    attendance_service.record_attendance("alice", _token("CS101", to_epoch_millis(fixed_now) + 60_000), now=fixed_now)
    attendance_service.record_attendance("alice", _token("CS101", to_epoch_millis(tomorrow) + 60_000), now=tomorrow)
    assert len(attendance.by_key) == 2


class _RacingAttendance:
    """The pre-check sees nothing, but another request wins the insert."""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def get_mark(self, **kwargs):
        return None


def test_lost_insert_race_is_already_marked(attendance, users, courses, fixed_now):
    service = AttendanceService(_RacingAttendance(attendance), users, courses)
    token = _token("CS101", to_epoch_millis(fixed_now) + 60_000)
    service.record_attendance("alice", token, now=fixed_now)

    with pytest.raises(AlreadyMarked):
        service.record_attendance("alice", token, now=fixed_now)
    assert len(attendance.by_key) == 1


def test_class_session_round_trip(session_service, attendance_service, alice, fixed_now):
    issued = session_service.issue_session("CS101", "drsmith", "Dr Smith", 1, now=fixed_now)

    mark = attendance_service.scan(alice, issued.token, now=fixed_now + timedelta(seconds=30))
    assert mark.course_code == "CS101"

    with pytest.raises(AlreadyMarked):
        attendance_service.scan(alice, issued.token, now=fixed_now + timedelta(seconds=40))


def test_teacher_cannot_scan(attendance_service, teacher, fixed_now):
    with pytest.raises(AuthorizationError):
        attendance_service.scan(teacher, _token("CS101", to_epoch_millis(fixed_now) + 60_000), now=fixed_now)


def test_scan_image_rejects_non_image(attendance_service, attendance, alice, fixed_now):
    with pytest.raises(MalformedToken):
        attendance_service.scan_image(alice, io.BytesIO(b"not a photo"), now=fixed_now)
    assert attendance.by_key == {}


def test_scan_image_of_rendered_qr_records_mark(attendance_service, alice, fixed_now):
    pytest.importorskip("pyzbar.pyzbar")
    token = _token("CS101", to_epoch_millis(fixed_now) + 60_000)

    mark = attendance_service.scan_image(alice, io.BytesIO(render_png(token)), now=fixed_now)

    assert mark.course_code == "CS101"
    assert mark.mark_date == date(2026, 2, 2)
