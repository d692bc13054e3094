from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..auth.principal import Principal
from ..common.datetime_utils import iso_utc_millis, month_bounds, now_local, to_epoch_millis
from ..common.validators import parse_month, parse_year
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyMarked,
    AuthorizationError,
    ConflictError,
    NotEnrolled,
    NotFoundError,
    TokenExpired,
)
from ..core.permissions import Action, is_allowed, require
from ..courses.repository import CourseRepository
from ..sessions.qr_image import decode_image
from ..sessions.token import decode_token
from ..users.repository import UserRepository
from .model import AttendanceMark
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

EXPORT_FIELDS = ["date", "studentId", "courseId", "courseName", "timestamp", "status"]


@dataclass(frozen=True)
class TodayCourseRow:
    course_code: str
    course_name: str
    present: bool
    marked_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_code,
            "course": self.course_name,
            "status": "Present" if self.present else "Absent",
            "timestamp": iso_utc_millis(self.marked_at) if self.marked_at else None,
        }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        courses: CourseRepository | None = None,
    ):
        self._attendance = attendance
        self._users = users
        self._courses = courses

    def record_attendance(self, student_id: str, presented_token: str, *, now: datetime | None = None) -> AttendanceMark:
        """Validate a presented QR token and write the day's mark.

        Checks run in order and the first failure is raised: malformed token,
        expired token, not enrolled, already marked. The mark date always comes
        from the server clock, never from the token.
        """
        now = now or now_local()
        payload = decode_token(presented_token)

        if to_epoch_millis(now) > payload.expiry:
            raise TokenExpired("QR code expired")

        student = self._users.get_by_username(student_id)
        if not student or not student.is_enrolled(payload.course_id):
            raise NotEnrolled(f"You are not enrolled in {payload.course_id}")

        today = now.date()
        if self._attendance.get_mark(student_username=student_id, course_code=payload.course_id, mark_date=today):
            raise AlreadyMarked("Attendance already recorded for today")

        try:
            mark_id = self._attendance.create_mark(
                student_username=student_id,
                course_code=payload.course_id,
                mark_date=today,
                marked_at=now,
                status=AttendanceStatus.PRESENT,
            )
        except ConflictError:
            # lost a double-scan race; the other request wrote the mark
            raise AlreadyMarked("Attendance already recorded for today")

        logger.info("Attendance recorded: %s in %s on %s", student_id, payload.course_id, today)
        return AttendanceMark(
            mark_id=mark_id,
            student_username=student_id,
            course_code=payload.course_id,
            mark_date=today,
            marked_at=now,
            status=AttendanceStatus.PRESENT,
        )

    def record_attendance_from_image(self, student_id: str, stream, *, now: datetime | None = None) -> AttendanceMark:
        """Same as ``record_attendance`` for a photo of the QR code; no readable QR counts as a malformed token."""
        return self.record_attendance(student_id, decode_image(stream), now=now)

    def scan(self, principal: Principal, presented_token: str, *, now: datetime | None = None) -> AttendanceMark:
        require(principal, Action.RECORD_ATTENDANCE)
        return self.record_attendance(principal.username, presented_token, now=now)

    def scan_image(self, principal: Principal, stream, *, now: datetime | None = None) -> AttendanceMark:
        require(principal, Action.RECORD_ATTENDANCE)
        return self.record_attendance_from_image(principal.username, stream, now=now)

    def list_today(self, principal: Principal, *, student: Optional[str] = None, now: datetime | None = None) -> Sequence[AttendanceMark]:
        today = (now or now_local()).date()
        return self._attendance.list_range(
            start_date=today,
            end_date=today,
            student_username=self._scope_student(principal, student),
        )

    def list_month(
        self,
        principal: Principal,
        *,
        month,
        year,
        student: Optional[str] = None,
        course: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        """Marks for one calendar month (``month`` is 1-12). Students only ever see their own."""
        start, end = month_bounds(parse_year(year), parse_month(month))
        return self._attendance.list_range(
            start_date=start,
            end_date=end,
            student_username=self._scope_student(principal, student),
            course_code=course or None,
        )

    def today_by_course(self, principal: Principal, *, now: datetime | None = None) -> list[TodayCourseRow]:
        require(principal, Action.VIEW_OWN_ATTENDANCE)
        user = self._users.get_by_username(principal.username)
        if not user:
            raise NotFoundError("User not found")

        marks = {m.course_code: m for m in self.list_today(principal, now=now)}
        names = self._course_names(user.courses)
        return [
            TodayCourseRow(
                course_code=code,
                course_name=names.get(code, code),
                present=code in marks,
                marked_at=marks[code].marked_at if code in marks else None,
            )
            for code in sorted(user.courses)
        ]

    def export_rows(self, principal: Principal, *, month, year, student: Optional[str] = None, course: Optional[str] = None) -> list[dict]:
        require(principal, Action.EXPORT_ATTENDANCE)
        marks = self.list_month(principal, month=month, year=year, student=student, course=course)
        names = self._course_names({m.course_code for m in marks})
        return [
            {
                "date": m.mark_date.strftime("%Y-%m-%d"),
                "studentId": m.student_username,
                "courseId": m.course_code,
                "courseName": names.get(m.course_code, m.course_code),
                "timestamp": m.marked_at.strftime("%Y-%m-%d %H:%M:%S"),
                "status": m.status.value,
            }
            for m in marks
        ]

    @staticmethod
    def _scope_student(principal: Principal, student: Optional[str]) -> Optional[str]:
        if is_allowed(principal.role, Action.VIEW_ALL_ATTENDANCE):
            return student or None
        if is_allowed(principal.role, Action.VIEW_OWN_ATTENDANCE):
            if student and student != principal.username:
                raise AuthorizationError("Students can only view their own attendance")
            return principal.username
        raise AuthorizationError("You do not have permission for this action")

    def _course_names(self, codes) -> dict[str, str]:
        if self._courses is None or not codes:
            return {}
        return {c.code: c.name for c in self._courses.list_by_codes(codes)}
