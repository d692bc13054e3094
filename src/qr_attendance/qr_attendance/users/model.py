from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a directory account.

    ``courses`` holds enrolled course codes for students and assigned course
    codes for teachers. Plain data object, no DB access.
    """

    username: str
    full_name: str
    password_hash: str
    role: Role
    courses: frozenset[str] = field(default_factory=frozenset)
    email: Optional[str] = None
    roll_no: Optional[str] = None

    def is_enrolled(self, course_code: str) -> bool:
        return course_code in self.courses

    def to_public_dict(self) -> dict:
        return {
            "username": self.username,
            "name": self.full_name,
            "role": self.role.value,
            "email": self.email,
            "rollNo": self.roll_no,
            "courses": sorted(self.courses),
        }
