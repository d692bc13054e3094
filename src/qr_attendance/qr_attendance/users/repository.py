from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """User directory interface.

    Note (DIP): services depend on this protocol, not on a concrete database.
    """

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError

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
        """Raises ``ConflictError`` when the username is taken."""

        raise NotImplementedError

    def delete(self, username: str, *, role: Optional[Role] = None) -> bool:
        raise NotImplementedError

    def update_profile(
        self,
        username: str,
        *,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        roll_no: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_courses(self, username: str, course_codes: Iterable[str]) -> bool:
        """Replace a user's whole course set."""

        raise NotImplementedError

    def add_course_to_users(self, course_code: str, usernames: Iterable[str], *, role: Role) -> int:
        """Add ``course_code`` to every listed user having ``role``; already-present codes are kept once."""

        raise NotImplementedError

    def remove_course_from_users(self, course_code: str, usernames: Optional[Iterable[str]] = None) -> int:
        """Remove ``course_code`` from the listed users, or from everyone when ``usernames`` is None."""

        raise NotImplementedError
