from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of one request.

    Built from the bearer token on every request and passed explicitly into
    services; nothing about the caller is kept in module state.
    """

    username: str
    role: Role
    name: str
