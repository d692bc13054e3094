from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Course


class CourseRepository(Protocol):
    def get_by_code(self, code: str) -> Optional[Course]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Course]:
        raise NotImplementedError

    def list_by_codes(self, codes: Iterable[str]) -> Sequence[Course]:
        raise NotImplementedError

    def create(self, *, code: str, name: str) -> None:
        """Raises ``ConflictError`` when the code is taken."""

        raise NotImplementedError

    def delete(self, code: str) -> bool:
        raise NotImplementedError
