from __future__ import annotations

from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import Course
from .repository import CourseRepository


def _row_to_course(row: dict) -> Course:
    return Course(code=row["code"], name=row["name"], created_at=row.get("created_at"))


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_code(self, code: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT code, name, created_at FROM courses WHERE code=%s", (code,))
            row = fetchone(cur)
            return _row_to_course(row) if row else None

    def list_all(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT code, name, created_at FROM courses ORDER BY code")
            return [_row_to_course(r) for r in fetchall(cur)]

    def list_by_codes(self, codes: Iterable[str]) -> Sequence[Course]:
        codes = sorted(set(codes))
        if not codes:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT code, name, created_at FROM courses WHERE code IN ({placeholders(len(codes))}) ORDER BY code",
                tuple(codes),
            )
            return [_row_to_course(r) for r in fetchall(cur)]

    def create(self, *, code: str, name: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT INTO courses(code, name) VALUES(%s,%s)", (code, name))
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("Course code already exists") from e
            raise

    def delete(self, code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE code=%s", (code,))
            return cur.rowcount > 0
