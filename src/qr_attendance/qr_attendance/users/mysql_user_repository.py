from __future__ import annotations

from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "username, full_name, password_hash, role, email, roll_no"


def _row_to_user(row: dict, courses: Iterable[str]) -> User:
    return User(
        username=row["username"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        courses=frozenset(courses),
        email=row.get("email"),
        roll_no=row.get("roll_no"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute("SELECT course_code FROM user_courses WHERE username=%s", (username,))
            codes = [r["course_code"] for r in fetchall(cur)]
            return _row_to_user(row, codes)

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s ORDER BY username", (role.value,))
            rows = fetchall(cur)
            cur.execute(
                """
                SELECT uc.username, uc.course_code
                FROM user_courses uc
                JOIN users u ON u.username = uc.username
                WHERE u.role=%s
                """,
                (role.value,),
            )
            courses: dict[str, list[str]] = {}
            for r in fetchall(cur):
                courses.setdefault(r["username"], []).append(r["course_code"])
            return [_row_to_user(r, courses.get(r["username"], ())) for r in rows]

    def create_user(
        self,
        *,
        username: str,
        full_name: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(username, full_name, password_hash, role, email, roll_no)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (username, full_name, password_hash, role.value, email, roll_no),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("Username already exists") from e
            raise

    def delete(self, username: str, *, role: Optional[Role] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute("DELETE FROM users WHERE username=%s", (username,))
            else:
                cur.execute("DELETE FROM users WHERE username=%s AND role=%s", (username, role.value))
            return cur.rowcount > 0

    def update_profile(
        self,
        username: str,
        *,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column, value in (("full_name", full_name), ("email", email), ("roll_no", roll_no)):
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            if not sets:
                cur.execute("SELECT 1 AS found FROM users WHERE username=%s", (username,))
                return fetchone(cur) is not None
            params.append(username)
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE username=%s", tuple(params))
            if cur.rowcount > 0:
                return True
            # rowcount is 0 when values did not change
            cur.execute("SELECT 1 AS found FROM users WHERE username=%s", (username,))
            return fetchone(cur) is not None

    def set_courses(self, username: str, course_codes: Iterable[str]) -> bool:
        codes = sorted(set(course_codes))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE username=%s", (username,))
            if not fetchone(cur):
                return False
            cur.execute("DELETE FROM user_courses WHERE username=%s", (username,))
            if codes:
                cur.executemany(
                    "INSERT INTO user_courses(username, course_code) VALUES(%s,%s)",
                    [(username, code) for code in codes],
                )
            return True

    def add_course_to_users(self, course_code: str, usernames: Iterable[str], *, role: Role) -> int:
        names = sorted(set(usernames))
        if not names:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT IGNORE INTO user_courses(username, course_code)
                SELECT username, %s FROM users
                WHERE role=%s AND username IN ({placeholders(len(names))})
                """,
                (course_code, role.value, *names),
            )
            return int(cur.rowcount)

    def remove_course_from_users(self, course_code: str, usernames: Optional[Iterable[str]] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if usernames is None:
                cur.execute("DELETE FROM user_courses WHERE course_code=%s", (course_code,))
            else:
                names = sorted(set(usernames))
                if not names:
                    return 0
                cur.execute(
                    f"DELETE FROM user_courses WHERE course_code=%s AND username IN ({placeholders(len(names))})",
                    (course_code, *names),
                )
            return int(cur.rowcount)
