from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of caller roles used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Status persisted on an attendance mark."""

    PRESENT = "present"


class SessionKind(str, Enum):
    """Distinguishes a real class session from an explicit "no class" declaration."""

    CLASS = "class"
    NO_CLASS = "no_class"


class ClassStatus(str, Enum):
    """What a student sees for one enrolled course on the scan screen."""

    ACTIVE = "active"
    NO_CLASS = "no_class"
    WAITING = "waiting"
