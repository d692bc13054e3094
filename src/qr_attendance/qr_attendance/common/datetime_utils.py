from __future__ import annotations

import calendar
from datetime import date, datetime, timezone


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_epoch_millis(value: datetime) -> int:
    """Epoch milliseconds for ``value`` (naive values are local time)."""
    return int(value.timestamp()) * 1000 + value.microsecond // 1000


def iso_utc_millis(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix, e.g. ``2026-02-01T09:00:00.000Z``."""
    utc = datetime.fromtimestamp(to_epoch_millis(value) / 1000, tz=timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
