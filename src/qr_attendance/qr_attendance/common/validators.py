from __future__ import annotations

from typing import Any

from ..core.constants import DEFAULT_SESSION_MINUTES, MAX_SESSION_MINUTES
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def parse_duration_minutes(value: Any, default: float = DEFAULT_SESSION_MINUTES) -> float:
    """Lenient duration parsing.

    Anything missing, non-numeric or non-positive falls back to ``default``;
    anything longer than ``MAX_SESSION_MINUTES`` is clamped to it.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        minutes = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if minutes != minutes or minutes <= 0 or minutes == float("inf"):
        return default
    return min(minutes, MAX_SESSION_MINUTES)


def parse_month(value: Any) -> int:
    try:
        month = int(value)
    except (TypeError, ValueError):
        raise ValidationError("month must be a number between 1 and 12")
    if not 1 <= month <= 12:
        raise ValidationError("month must be a number between 1 and 12")
    return month


def parse_year(value: Any) -> int:
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise ValidationError("year is not valid")
    if not 1970 <= year <= 9999:
        raise ValidationError("year is not valid")
    return year
