from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceMark


class AttendanceRepository(Protocol):
    def get_mark(self, *, student_username: str, course_code: str, mark_date: date) -> Optional[AttendanceMark]:
        raise NotImplementedError

    def create_mark(
        self,
        *,
        student_username: str,
        course_code: str,
        mark_date: date,
        marked_at: datetime,
        status: AttendanceStatus,
    ) -> int:
        """Insert one mark.

        Raises ``ConflictError`` when (student, course, date) already exists; the
        uniqueness check is atomic in the store.
        """

        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        student_username: Optional[str] = None,
        course_code: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        raise NotImplementedError
