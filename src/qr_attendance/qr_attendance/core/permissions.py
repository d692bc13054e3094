"""Per-operation authorization.

Every protected operation names an ``Action``; the grant table below is the only
place that maps roles to actions.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .enums import Role
from .exceptions import AuthorizationError

if TYPE_CHECKING:
    from ..auth.principal import Principal


class Action(str, Enum):
    MANAGE_DIRECTORY = "manage_directory"
    VIEW_ASSIGNED_COURSES = "view_assigned_courses"
    ISSUE_SESSION = "issue_session"
    VIEW_CURRENT_SESSION = "view_current_session"
    RECORD_ATTENDANCE = "record_attendance"
    VIEW_OWN_ATTENDANCE = "view_own_attendance"
    VIEW_ALL_ATTENDANCE = "view_all_attendance"
    EXPORT_ATTENDANCE = "export_attendance"


_GRANTS: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset(
        {
            Action.MANAGE_DIRECTORY,
            Action.VIEW_ALL_ATTENDANCE,
            Action.EXPORT_ATTENDANCE,
        }
    ),
    Role.TEACHER: frozenset(
        {
            Action.VIEW_ASSIGNED_COURSES,
            Action.ISSUE_SESSION,
            Action.VIEW_CURRENT_SESSION,
            Action.VIEW_ALL_ATTENDANCE,
            Action.EXPORT_ATTENDANCE,
        }
    ),
    Role.STUDENT: frozenset(
        {
            Action.VIEW_CURRENT_SESSION,
            Action.RECORD_ATTENDANCE,
            Action.VIEW_OWN_ATTENDANCE,
        }
    ),
}


def is_allowed(role: Role, action: Action) -> bool:
    return action in _GRANTS.get(role, frozenset())


def require(principal: "Principal", action: Action) -> None:
    if not is_allowed(principal.role, action):
        raise AuthorizationError("You do not have permission for this action")
