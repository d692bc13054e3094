from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import iso_utc_millis
from ..core.enums import SessionKind


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: one teacher-declared class occurrence with an expiry.

    Only ``active`` ever changes after creation (true -> false, never back).
    """

    session_id: int
    course_code: str
    teacher_username: str
    teacher_name: str
    created_at: datetime
    expiry_ms: int
    active: bool
    kind: SessionKind = SessionKind.CLASS

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expiry_ms

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "courseId": self.course_code,
            "teacherId": self.teacher_username,
            "teacherName": self.teacher_name,
            "createdAt": iso_utc_millis(self.created_at),
            "expiry": self.expiry_ms,
            "active": self.active,
            "kind": self.kind.value,
        }
