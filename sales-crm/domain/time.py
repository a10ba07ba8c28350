"""
Domain time utilities (pure).

Centralized timestamp validation and calendar helpers.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from .errors import DataIntegrityError

DEFAULT_DISPLAY_TIMEZONE: str = "Europe/Lisbon"

# Portuguese short month names, index 0 is January.
MONTH_ABBREVIATIONS_PT: Tuple[str, ...] = (
    "jan", "fev", "mar", "abr", "mai", "jun",
    "jul", "ago", "set", "out", "nov", "dez",
)


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if not isinstance(value, datetime):
        raise DataIntegrityError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise DataIntegrityError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise DataIntegrityError(f"{name} must be a UTC timestamp (offset 0)")


def utc_midnight(value: date) -> datetime:
    """Interpret a calendar date as 00:00 UTC on that day."""

    return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)


def calendar_month(value: datetime, tz: ZoneInfo) -> Tuple[int, int]:
    """Return the (year, month) of a timestamp as seen from the display timezone."""

    local = value.astimezone(tz)
    return local.year, local.month


def month_label(year: int, month: int) -> str:
    """Display label for a calendar month, e.g. ``mar 2024``."""

    return f"{MONTH_ABBREVIATIONS_PT[month - 1]} {year}"


__all__ = [
    "DEFAULT_DISPLAY_TIMEZONE",
    "MONTH_ABBREVIATIONS_PT",
    "calendar_month",
    "month_label",
    "require_utc_timestamp",
    "utc_midnight",
]
