from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import SessionKind
from .model import ClassSession


class SessionRepository(Protocol):
    def create(
        self,
        *,
        course_code: str,
        teacher_username: str,
        teacher_name: str,
        created_at: datetime,
        expiry_ms: int,
        active: bool,
        kind: SessionKind,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def get_latest_active(self, course_code: Optional[str] = None) -> Optional[ClassSession]:
        """Newest session with active=true, optionally for one course (ties: higher id wins)."""

        raise NotImplementedError

    def get_latest(self, course_code: str, *, since: Optional[datetime] = None) -> Optional[ClassSession]:
        """Newest session of a course regardless of the active flag."""

        raise NotImplementedError

    def deactivate(self, session_id: int) -> bool:
        """Set active=false. Idempotent; returns False when the row was already inactive or missing."""

        raise NotImplementedError

    def deactivate_expired(self, now_ms: int) -> int:
        raise NotImplementedError
