"""The QR payload: a flat JSON object that scanning clients send back verbatim.

Field names and types are fixed for interoperability with existing clients::

    {"courseId": str, "teacherId": str, "teacherName": str,
     "timestamp": ISO-8601 str, "expiry": epoch millis}
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import iso_utc_millis
from ..core.constants import MAX_EXPIRY_MS
from ..core.exceptions import MalformedToken
from .model import ClassSession


@dataclass(frozen=True)
class QRPayload:
    course_id: str
    teacher_id: str
    teacher_name: str
    timestamp: str
    expiry: int

    @classmethod
    def for_session(cls, session: ClassSession, *, issued_at: datetime | None = None) -> "QRPayload":
        return cls(
            course_id=session.course_code,
            teacher_id=session.teacher_username,
            teacher_name=session.teacher_name,
            timestamp=iso_utc_millis(issued_at or session.created_at),
            expiry=int(session.expiry_ms),
        )

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "timestamp": self.timestamp,
            "expiry": self.expiry,
        }

    def encode(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def decode_token(raw: str) -> QRPayload:
    """Parse a presented token. Only ``courseId`` and ``expiry`` are mandatory."""
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedToken("QR code is empty")
    try:
        data = json.loads(raw)
    except ValueError:
        raise MalformedToken("Invalid QR code format")
    if not isinstance(data, dict):
        raise MalformedToken("Invalid QR code format")

    course_id = data.get("courseId")
    if not isinstance(course_id, str) or not course_id.strip():
        raise MalformedToken("QR code has no course")

    expiry = data.get("expiry")
    # bool is an int subclass; JSON true/false is not an expiry
    if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
        raise MalformedToken("QR code has no valid expiry")
    # JSON integers are unbounded; expiry must fit epoch millis as stored
    if isinstance(expiry, float) and not math.isfinite(expiry):
        raise MalformedToken("QR code has no valid expiry")
    if abs(int(expiry)) > MAX_EXPIRY_MS:
        raise MalformedToken("QR code has no valid expiry")

    return QRPayload(
        course_id=course_id.strip(),
        teacher_id=str(data.get("teacherId") or ""),
        teacher_name=str(data.get("teacherName") or ""),
        timestamp=str(data.get("timestamp") or ""),
        expiry=int(expiry),
    )
