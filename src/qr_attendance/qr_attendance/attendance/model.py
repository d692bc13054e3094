from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..common.datetime_utils import iso_utc_millis
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceMark:
    """Domain entity: a student attended a course on a date. Immutable once written."""

    mark_id: int
    student_username: str
    course_code: str
    mark_date: date
    marked_at: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "studentId": self.student_username,
            "courseId": self.course_code,
            "date": self.mark_date.strftime("%Y-%m-%d"),
            "timestamp": iso_utc_millis(self.marked_at),
            "status": self.status.value,
        }
