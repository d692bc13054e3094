from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.qr_attendance.qr_attendance.attendance.model import AttendanceMark
from src.qr_attendance.qr_attendance.attendance.service import AttendanceService
from src.qr_attendance.qr_attendance.auth.principal import Principal
from src.qr_attendance.qr_attendance.core.enums import AttendanceStatus, Role
from src.qr_attendance.qr_attendance.core.exceptions import ConflictError
from src.qr_attendance.qr_attendance.courses.model import Course
from src.qr_attendance.qr_attendance.courses.service import CourseService
from src.qr_attendance.qr_attendance.sessions.model import ClassSession
from src.qr_attendance.qr_attendance.sessions.service import SessionService
from src.qr_attendance.qr_attendance.users.model import User


class InMemoryUsers:
    def __init__(self, users: Iterable[User] = ()):
        self.by_username: dict[str, User] = {u.username: u for u in users}

    def get_by_username(self, username: str) -> Optional[User]:
        return self.by_username.get(username)

    def list_by_role(self, role: Role):
        return sorted((u for u in self.by_username.values() if u.role == role), key=lambda u: u.username)

    def create_user(self, *, username, full_name, password_hash, role, email=None, roll_no=None) -> None:
        if username in self.by_username:
            raise ConflictError("Username already exists")
        self.by_username[username] = User(username, full_name, password_hash, role, frozenset(), email, roll_no)

    def delete(self, username: str, *, role: Optional[Role] = None) -> bool:
        user = self.by_username.get(username)
        if not user or (role is not None and user.role != role):
            return False
        del self.by_username[username]
        return True

    def update_profile(self, username, *, full_name=None, email=None, roll_no=None) -> bool:
        user = self.by_username.get(username)
        if not user:
            return False
        self.by_username[username] = replace(
            user,
            full_name=full_name if full_name is not None else user.full_name,
            email=email if email is not None else user.email,
            roll_no=roll_no if roll_no is not None else user.roll_no,
        )
        return True

    def set_courses(self, username, course_codes) -> bool:
        user = self.by_username.get(username)
        if not user:
            return False
        self.by_username[username] = replace(user, courses=frozenset(course_codes))
        return True

    def add_course_to_users(self, course_code, usernames, *, role) -> int:
        count = 0
        for name in usernames:
            user = self.by_username.get(name)
            if user and user.role == role and course_code not in user.courses:
                self.by_username[name] = replace(user, courses=user.courses | {course_code})
                count += 1
        return count

    def remove_course_from_users(self, course_code, usernames=None) -> int:
        targets = list(self.by_username) if usernames is None else list(usernames)
        count = 0
        for name in targets:
            user = self.by_username.get(name)
            if user and course_code in user.courses:
                self.by_username[name] = replace(user, courses=user.courses - {course_code})
                count += 1
        return count


class InMemoryCourses:
    def __init__(self, courses: Iterable[Course] = ()):
        self.by_code: dict[str, Course] = {c.code: c for c in courses}

    def get_by_code(self, code):
        return self.by_code.get(code)

    def list_all(self):
        return sorted(self.by_code.values(), key=lambda c: c.code)

    def list_by_codes(self, codes):
        return [self.by_code[c] for c in sorted(set(codes)) if c in self.by_code]

    def create(self, *, code, name) -> None:
        if code in self.by_code:
            raise ConflictError("Course code already exists")
        self.by_code[code] = Course(code=code, name=name)

    def delete(self, code) -> bool:
        return self.by_code.pop(code, None) is not None


class InMemorySessions:
    def __init__(self):
        self.rows: dict[int, ClassSession] = {}
        self._id = 0

    def create(self, *, course_code, teacher_username, teacher_name, created_at, expiry_ms, active, kind) -> int:
        self._id += 1
        self.rows[self._id] = ClassSession(
            session_id=self._id,
            course_code=course_code,
            teacher_username=teacher_username,
            teacher_name=teacher_name,
            created_at=created_at,
            expiry_ms=expiry_ms,
            active=active,
            kind=kind,
        )
        return self._id

    def get_by_id(self, session_id):
        return self.rows.get(session_id)

    def _newest(self, rows):
        rows = sorted(rows, key=lambda s: (s.created_at, s.session_id), reverse=True)
        return rows[0] if rows else None

    def get_latest_active(self, course_code=None):
        return self._newest(
            s for s in self.rows.values() if s.active and (course_code is None or s.course_code == course_code)
        )

    def get_latest(self, course_code, *, since=None):
        return self._newest(
            s for s in self.rows.values() if s.course_code == course_code and (since is None or s.created_at >= since)
        )

    def deactivate(self, session_id) -> bool:
        row = self.rows.get(session_id)
        if not row or not row.active:
            return False
        self.rows[session_id] = replace(row, active=False)
        return True

    def deactivate_expired(self, now_ms) -> int:
        expired = [s.session_id for s in self.rows.values() if s.active and s.expiry_ms < now_ms]
        for session_id in expired:
            self.deactivate(session_id)
        return len(expired)


class InMemoryAttendance:
    def __init__(self):
        self.by_key: dict[tuple[str, str, date], AttendanceMark] = {}
        self._id = 0

    def get_mark(self, *, student_username, course_code, mark_date):
        return self.by_key.get((student_username, course_code, mark_date))

    def create_mark(self, *, student_username, course_code, mark_date, marked_at, status=AttendanceStatus.PRESENT) -> int:
        key = (student_username, course_code, mark_date)
        if key in self.by_key:
            raise ConflictError("Duplicate attendance mark")
        self._id += 1
        self.by_key[key] = AttendanceMark(self._id, student_username, course_code, mark_date, marked_at, status)
        return self._id

    def list_range(self, *, start_date, end_date, student_username=None, course_code=None):
        rows = [
            m
            for m in self.by_key.values()
            if start_date <= m.mark_date <= end_date
            and (student_username is None or m.student_username == student_username)
            and (course_code is None or m.course_code == course_code)
        ]
        return sorted(rows, key=lambda m: (m.mark_date, m.marked_at), reverse=True)


def make_user(username: str, role: Role, courses=(), *, full_name: Optional[str] = None, password: str = "secret123") -> User:
    return User(
        username=username,
        full_name=full_name or username.capitalize(),
        password_hash=generate_password_hash(password),
        role=role,
        courses=frozenset(courses),
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            make_user("admin", Role.ADMIN, full_name="System Administrator"),
            make_user("drsmith", Role.TEACHER, ["CS101", "CS201"], full_name="Dr Smith"),
            make_user("alice", Role.STUDENT, ["CS101"]),
            make_user("bob", Role.STUDENT, ["CS201"]),
        ]
    )


@pytest.fixture
def courses() -> InMemoryCourses:
    return InMemoryCourses([Course("CS101", "Introduction to Programming"), Course("CS201", "Data Structures")])


@pytest.fixture
def sessions() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def session_service(sessions, users, courses) -> SessionService:
    return SessionService(sessions, users, courses)


@pytest.fixture
def attendance_service(attendance, users, courses) -> AttendanceService:
    return AttendanceService(attendance, users, courses)


@pytest.fixture
def course_service(courses, users) -> CourseService:
    return CourseService(courses, users)


@pytest.fixture
def admin() -> Principal:
    return Principal("admin", Role.ADMIN, "System Administrator")


@pytest.fixture
def teacher() -> Principal:
    return Principal("drsmith", Role.TEACHER, "Dr Smith")


@pytest.fixture
def alice() -> Principal:
    return Principal("alice", Role.STUDENT, "Alice")


