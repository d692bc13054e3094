from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceMark
from .repository import AttendanceRepository

_MARK_COLUMNS = "mark_id, student_username, course_code, mark_date, marked_at, status"


def _row_to_mark(r: dict) -> AttendanceMark:
    return AttendanceMark(
        mark_id=int(r["mark_id"]),
        student_username=r["student_username"],
        course_code=r["course_code"],
        mark_date=r["mark_date"],
        marked_at=r["marked_at"],
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_mark(self, *, student_username: str, course_code: str, mark_date: date) -> Optional[AttendanceMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MARK_COLUMNS}
                FROM attendance_marks
                WHERE student_username=%s AND course_code=%s AND mark_date=%s
                """,
                (student_username, course_code, mark_date),
            )
            r = fetchone(cur)
            return _row_to_mark(r) if r else None

    def create_mark(
        self,
        *,
        student_username: str,
        course_code: str,
        mark_date: date,
        marked_at: datetime,
        status: AttendanceStatus,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_marks(student_username, course_code, mark_date, marked_at, status)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (student_username, course_code, mark_date, marked_at, status.value),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("Attendance already marked") from e
            raise

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        student_username: Optional[str] = None,
        course_code: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        clauses = ["mark_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if student_username is not None:
            clauses.append("student_username=%s")
            params.append(student_username)
        if course_code is not None:
            clauses.append("course_code=%s")
            params.append(course_code)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MARK_COLUMNS}
                FROM attendance_marks
                WHERE {" AND ".join(clauses)}
                ORDER BY mark_date DESC, marked_at DESC
                """,
                tuple(params),
            )
            return [_row_to_mark(r) for r in fetchall(cur)]
