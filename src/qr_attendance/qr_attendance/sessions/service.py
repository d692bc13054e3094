from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

from ..auth.principal import Principal
from ..common.datetime_utils import now_local, to_epoch_millis
from ..common.validators import parse_duration_minutes, require_non_empty
from ..core.constants import DEFAULT_SESSION_MINUTES, MILLIS_PER_MINUTE
from ..core.enums import ClassStatus, SessionKind
from ..core.exceptions import NotFoundError
from ..core.permissions import Action, require
from ..courses.repository import CourseRepository
from ..users.repository import UserRepository
from .model import ClassSession
from .repository import SessionRepository
from .token import QRPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    session: ClassSession
    token: str


@dataclass(frozen=True)
class CourseClassStatus:
    course_code: str
    course_name: str
    status: ClassStatus
    expiry_ms: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_code,
            "courseName": self.course_name,
            "status": self.status.value,
            "expiry": self.expiry_ms,
        }


class SessionService:
    """Issue and resolve class sessions.

    Reads may write: ``resolve_current`` deactivates the newest active session
    of a course once it is past its expiry. That write is idempotent and a
    failure of it never changes the answer.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        users: UserRepository,
        courses: CourseRepository | None = None,
        *,
        default_minutes: float = DEFAULT_SESSION_MINUTES,
    ):
        self._sessions = sessions
        self._users = users
        self._courses = courses
        self._default_minutes = default_minutes

    # Issuer

    def issue_session(
        self,
        course_id: str,
        issuer_id: str,
        issuer_name: str,
        duration_minutes: Any = None,
        *,
        now: datetime | None = None,
    ) -> IssuedSession:
        course_id = require_non_empty(course_id, "courseId")
        now = now or now_local()
        minutes = parse_duration_minutes(duration_minutes, self._default_minutes)
        expiry_ms = to_epoch_millis(now) + int(minutes * MILLIS_PER_MINUTE)

        session_id = self._sessions.create(
            course_code=course_id,
            teacher_username=issuer_id,
            teacher_name=issuer_name,
            created_at=now,
            expiry_ms=expiry_ms,
            active=True,
            kind=SessionKind.CLASS,
        )
        session = ClassSession(
            session_id=session_id,
            course_code=course_id,
            teacher_username=issuer_id,
            teacher_name=issuer_name,
            created_at=now,
            expiry_ms=expiry_ms,
            active=True,
            kind=SessionKind.CLASS,
        )
        logger.info("Session %s issued for %s by %s (%.2f min)", session_id, course_id, issuer_id, minutes)
        return IssuedSession(session=session, token=QRPayload.for_session(session).encode())

    def mark_no_class(
        self,
        course_id: str,
        issuer_id: str,
        issuer_name: str,
        *,
        now: datetime | None = None,
    ) -> ClassSession:
        course_id = require_non_empty(course_id, "courseId")
        now = now or now_local()
        session_id = self._sessions.create(
            course_code=course_id,
            teacher_username=issuer_id,
            teacher_name=issuer_name,
            created_at=now,
            expiry_ms=0,
            active=False,
            kind=SessionKind.NO_CLASS,
        )
        logger.info("No class declared for %s by %s", course_id, issuer_id)
        return ClassSession(
            session_id=session_id,
            course_code=course_id,
            teacher_username=issuer_id,
            teacher_name=issuer_name,
            created_at=now,
            expiry_ms=0,
            active=False,
            kind=SessionKind.NO_CLASS,
        )

    def start_class(self, principal: Principal, course_id: str, duration_minutes: Any = None, *, now: datetime | None = None) -> IssuedSession:
        require(principal, Action.ISSUE_SESSION)
        return self.issue_session(course_id, principal.username, self._display_name(principal), duration_minutes, now=now)

    def declare_no_class(self, principal: Principal, course_id: str, *, now: datetime | None = None) -> ClassSession:
        require(principal, Action.ISSUE_SESSION)
        return self.mark_no_class(course_id, principal.username, self._display_name(principal), now=now)

    def _display_name(self, principal: Principal) -> str:
        user = self._users.get_by_username(principal.username)
        return user.full_name if user and user.full_name else principal.username

    # Resolver

    def resolve_current(self, course_id: Optional[str] = None, *, now: datetime | None = None) -> Optional[ClassSession]:
        session = self._sessions.get_latest_active(course_id or None)
        if not session:
            return None

        now_ms = to_epoch_millis(now or now_local())
        if session.is_expired(now_ms):
            try:
                self._sessions.deactivate(session.session_id)
                logger.info("Session %s for %s expired, deactivated", session.session_id, session.course_code)
            except Exception:
                # Expiry is re-evaluated on every read; the flip is best-effort.
                logger.warning("Could not deactivate expired session %s", session.session_id, exc_info=True)
            return None
        return session

    def current_token(self, principal: Principal, course_id: Optional[str] = None, *, now: datetime | None = None) -> Optional[IssuedSession]:
        require(principal, Action.VIEW_CURRENT_SESSION)
        session = self.resolve_current(course_id, now=now)
        if not session:
            return None
        return IssuedSession(session=session, token=QRPayload.for_session(session).encode())

    def sweep_expired(self, *, now: datetime | None = None) -> int:
        """Deactivate every active session already past its expiry."""
        count = self._sessions.deactivate_expired(to_epoch_millis(now or now_local()))
        logger.info("Expiry sweep deactivated %s session(s)", count)
        return count

    def course_statuses(self, principal: Principal, *, now: datetime | None = None) -> list[CourseClassStatus]:
        """Per enrolled course: a valid session exists, no class was declared today, or still waiting."""
        require(principal, Action.RECORD_ATTENDANCE)
        now = now or now_local()
        user = self._users.get_by_username(principal.username)
        if not user:
            raise NotFoundError("User not found")

        names: dict[str, str] = {}
        if self._courses is not None:
            names = {c.code: c.name for c in self._courses.list_by_codes(user.courses)}

        start_of_day = datetime.combine(now.date(), time.min)
        out: list[CourseClassStatus] = []
        for code in sorted(user.courses):
            name = names.get(code, code)
            current = self.resolve_current(code, now=now)
            if current:
                out.append(CourseClassStatus(code, name, ClassStatus.ACTIVE, current.expiry_ms))
                continue
            latest = self._sessions.get_latest(code, since=start_of_day)
            if latest and latest.kind == SessionKind.NO_CLASS:
                out.append(CourseClassStatus(code, name, ClassStatus.NO_CLASS))
            else:
                out.append(CourseClassStatus(code, name, ClassStatus.WAITING))
        return out
