from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.guard import make_guard
from .auth.tokens import AccessTokenCodec
from .core.constants import DEFAULT_SESSION_MINUTES, DEFAULT_STUDENT_PASSWORD, DEFAULT_TEACHER_PASSWORD
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    courses_repo: CourseRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    token_codec: AccessTokenCodec
    guard: Callable

    auth_service: AuthService
    user_service: UserService
    course_service: CourseService
    session_service: SessionService
    attendance_service: AttendanceService


def wire(
    *,
    users_repo: UserRepository,
    courses_repo: CourseRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    jwt_secret: str,
    jwt_ttl_hours: float = 8,
    default_session_minutes: float = DEFAULT_SESSION_MINUTES,
    default_student_password: str = DEFAULT_STUDENT_PASSWORD,
    default_teacher_password: str = DEFAULT_TEACHER_PASSWORD,
) -> Container:
    """Assemble services over any set of repositories (MySQL in the app, in-memory in tests)."""
    codec = AccessTokenCodec(jwt_secret, ttl_hours=jwt_ttl_hours)

    return Container(
        users_repo=users_repo,
        courses_repo=courses_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        token_codec=codec,
        guard=make_guard(codec),
        auth_service=AuthService(users_repo),
        user_service=UserService(
            users_repo,
            default_student_password=default_student_password,
            default_teacher_password=default_teacher_password,
        ),
        course_service=CourseService(courses_repo, users_repo),
        session_service=SessionService(
            sessions_repo,
            users_repo,
            courses_repo,
            default_minutes=default_session_minutes,
        ),
        attendance_service=AttendanceService(attendance_repo, users_repo, courses_repo),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        jwt_secret=str(getattr(settings, "JWT_SECRET", "") or getattr(settings, "SECRET_KEY", "")),
        jwt_ttl_hours=float(getattr(settings, "JWT_TTL_HOURS", 8)),
        default_session_minutes=float(getattr(settings, "DEFAULT_SESSION_MINUTES", DEFAULT_SESSION_MINUTES)),
        default_student_password=str(getattr(settings, "DEFAULT_STUDENT_PASSWORD", DEFAULT_STUDENT_PASSWORD)),
        default_teacher_password=str(getattr(settings, "DEFAULT_TEACHER_PASSWORD", DEFAULT_TEACHER_PASSWORD)),
    )
