from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..auth.principal import Principal
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import (
    DEFAULT_STUDENT_PASSWORD,
    DEFAULT_TEACHER_PASSWORD,
    STUDENT_EMAIL_DOMAIN,
    TEACHER_EMAIL_DOMAIN,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.permissions import Action, require
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate a user (login) and re-read the caller's record."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> User:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            logger.info("Login failed for unknown username %r", username)
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hash values
            ok = False

        if not ok:
            logger.info("Login failed for %r", user.username)
            raise AuthenticationError("Invalid username or password")
        return user

    def refresh(self, principal: Principal) -> User:
        """Authoritative user record for the caller (picks up admin changes to courses)."""
        user = self._users.get_by_username(principal.username)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def principal_for(user: User) -> Principal:
        return Principal(username=user.username, role=user.role, name=user.full_name)


def student_username(full_name: str) -> str:
    return re.sub(r"\s+", "", full_name.lower())


def student_email(username: str, roll_no: str) -> str:
    digits = re.sub(r"[^0-9]", "", roll_no)
    return f"{username}{digits}@{STUDENT_EMAIL_DOMAIN}"


class UserService:
    """Use case: manage students and teachers (admin)."""

    def __init__(
        self,
        users: UserRepository,
        *,
        default_student_password: str = DEFAULT_STUDENT_PASSWORD,
        default_teacher_password: str = DEFAULT_TEACHER_PASSWORD,
    ):
        self._users = users
        self._default_student_password = default_student_password
        self._default_teacher_password = default_teacher_password

    def create_student(self, principal: Principal, *, full_name: str, roll_no: str) -> User:
        require(principal, Action.MANAGE_DIRECTORY)
        full_name = require_non_empty(full_name, "name")
        roll_no = require_non_empty(roll_no, "rollNo")

        username = student_username(full_name)
        self._users.create_user(
            username=username,
            full_name=full_name,
            password_hash=generate_password_hash(self._default_student_password),
            role=Role.STUDENT,
            email=student_email(username, roll_no),
            roll_no=roll_no,
        )
        logger.info("Student %r created by %s", username, principal.username)
        return self._get(username)

    def create_teacher(
        self,
        principal: Principal,
        *,
        full_name: str,
        username: str,
        password: Optional[str] = None,
    ) -> User:
        require(principal, Action.MANAGE_DIRECTORY)
        full_name = require_non_empty(full_name, "name")
        username = require_non_empty(username, "username")
        password = password or self._default_teacher_password
        require_min_length(password, "password", 6)

        self._users.create_user(
            username=username,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=Role.TEACHER,
            email=f"{username}@{TEACHER_EMAIL_DOMAIN}",
        )
        logger.info("Teacher %r created by %s", username, principal.username)
        return self._get(username)

    def list_users(self, principal: Principal, role: Role) -> Sequence[User]:
        require(principal, Action.MANAGE_DIRECTORY)
        return self._users.list_by_role(role)

    def delete_user(self, principal: Principal, username: str, *, role: Role) -> None:
        require(principal, Action.MANAGE_DIRECTORY)
        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted here")
        if not self._users.delete(username, role=role):
            raise NotFoundError(f"{role.value.capitalize()} not found")
        logger.info("%s %r deleted by %s", role.value.capitalize(), username, principal.username)

    def update_user(
        self,
        principal: Principal,
        username: str,
        *,
        courses: Optional[Iterable[str]] = None,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> User:
        require(principal, Action.MANAGE_DIRECTORY)
        if full_name is not None:
            full_name = require_non_empty(full_name, "name")

        if not self._users.update_profile(username, full_name=full_name, email=email, roll_no=roll_no):
            raise NotFoundError("User not found")

        if courses is not None:
            if isinstance(courses, str):
                raise ValidationError("courses must be a list of course codes")
            codes = {require_non_empty(c, "course code") for c in courses}
            self._users.set_courses(username, codes)
        return self._get(username)

    def _get(self, username: str) -> User:
        user = self._users.get_by_username(username)
        if not user:
            raise NotFoundError("User not found")
        return user
