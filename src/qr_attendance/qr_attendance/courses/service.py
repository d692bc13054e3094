from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..auth.principal import Principal
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Action, require
from ..users.repository import UserRepository
from .model import Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    """Use case: course registry and enrollment (admin), course lookups (everyone)."""

    def __init__(self, courses: CourseRepository, users: UserRepository):
        self._courses = courses
        self._users = users

    def list_courses(self) -> Sequence[Course]:
        return self._courses.list_all()

    def get_course(self, code: str) -> Course:
        course = self._courses.get_by_code(code)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def create_course(self, principal: Principal, *, code: str, name: str) -> Course:
        require(principal, Action.MANAGE_DIRECTORY)
        code = require_non_empty(code, "code")
        name = require_non_empty(name, "name")
        self._courses.create(code=code, name=name)
        logger.info("Course %r created by %s", code, principal.username)
        return Course(code=code, name=name)

    def delete_course(self, principal: Principal, code: str) -> int:
        """Delete a course and strip its code from every user's course set.

        Returns how many memberships were removed. Session and attendance
        history for the code is kept.
        """
        require(principal, Action.MANAGE_DIRECTORY)
        deleted = self._courses.delete(code)
        removed = self._users.remove_course_from_users(code)
        if not deleted and not removed:
            raise NotFoundError("Course not found")
        logger.info("Course %r deleted by %s (%s memberships removed)", code, principal.username, removed)
        return removed

    def enroll_students(self, principal: Principal, code: str, usernames: Iterable[str]) -> int:
        require(principal, Action.MANAGE_DIRECTORY)
        names = self._require_usernames(usernames)
        self.get_course(code)
        return self._users.add_course_to_users(code, names, role=Role.STUDENT)

    def unenroll_students(self, principal: Principal, code: str, usernames: Iterable[str]) -> int:
        require(principal, Action.MANAGE_DIRECTORY)
        names = self._require_usernames(usernames)
        return self._users.remove_course_from_users(code, names)

    def courses_for(self, principal: Principal) -> Sequence[Course]:
        """Courses in the caller's own course set.

        Codes without a course row are returned with the code as display name.
        """
        require(principal, Action.VIEW_ASSIGNED_COURSES)
        user = self._users.get_by_username(principal.username)
        if not user:
            raise NotFoundError("Teacher not found")
        found = {c.code: c for c in self._courses.list_by_codes(user.courses)}
        return [found.get(code) or Course(code=code, name=code) for code in sorted(user.courses)]

    @staticmethod
    def _require_usernames(usernames: Iterable[str]) -> list[str]:
        if usernames is None or isinstance(usernames, str):
            raise ValidationError("usernames array required")
        names = [str(u).strip() for u in usernames if u and str(u).strip()]
        if not names:
            raise ValidationError("usernames array required")
        return names
