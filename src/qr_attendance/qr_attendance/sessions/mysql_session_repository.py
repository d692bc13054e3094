from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import SessionKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ClassSession
from .repository import SessionRepository

_SESSION_COLUMNS = "session_id, course_code, teacher_username, teacher_name, kind, created_at, expiry_ms, active"


def _row_to_session(row: dict) -> ClassSession:
    return ClassSession(
        session_id=int(row["session_id"]),
        course_code=row["course_code"],
        teacher_username=row["teacher_username"],
        teacher_name=row["teacher_name"],
        created_at=row["created_at"],
        expiry_ms=int(row["expiry_ms"]),
        active=bool(row["active"]),
        kind=SessionKind(row.get("kind") or SessionKind.CLASS.value),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(course_code, teacher_username, teacher_name, kind, created_at, expiry_ms, active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (course_code, teacher_username, teacher_name, kind.value, created_at, int(expiry_ms), int(active)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM class_sessions WHERE session_id=%s", (int(session_id),))
            row = fetchone(cur)
            return _row_to_session(row) if row else None

    def get_latest_active(self, course_code: Optional[str] = None) -> Optional[ClassSession]:
        clauses = ["active=1"]
        params: list[object] = []
        if course_code:
            clauses.append("course_code=%s")
            params.append(course_code)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM class_sessions
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, session_id DESC
                LIMIT 1
                """,
                tuple(params),
            )
            row = fetchone(cur)
            return _row_to_session(row) if row else None

    def get_latest(self, course_code: str, *, since: Optional[datetime] = None) -> Optional[ClassSession]:
        clauses = ["course_code=%s"]
        params: list[object] = [course_code]
        if since is not None:
            clauses.append("created_at >= %s")
            params.append(since)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM class_sessions
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, session_id DESC
                LIMIT 1
                """,
                tuple(params),
            )
            row = fetchone(cur)
            return _row_to_session(row) if row else None

    def deactivate(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE class_sessions SET active=0 WHERE session_id=%s AND active=1", (int(session_id),))
            return cur.rowcount > 0

    def deactivate_expired(self, now_ms: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE class_sessions SET active=0 WHERE active=1 AND expiry_ms < %s", (int(now_ms),))
            return int(cur.rowcount)
