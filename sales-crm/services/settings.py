"""
Runtime settings for the dashboard and reports.

Values come from environment variables (optionally from `sales-crm/.env`):
- CRM_DISPLAY_TIMEZONE: IANA zone used to decide calendar months (default Europe/Lisbon)
- CRM_DASHBOARD_MONTHS: trailing monthly buckets shown on the dashboard (default 6)
- CRM_ALERT_PREVIEW: loyalty alerts shown in the dashboard preview (default 5)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from domain.metrics import DEFAULT_MONTHLY_WINDOW
from domain.time import DEFAULT_DISPLAY_TIMEZONE

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_ALERT_PREVIEW: int = 5


@dataclass(frozen=True, slots=True)
class Settings:
    display_timezone: ZoneInfo
    dashboard_months: int = DEFAULT_MONTHLY_WINDOW
    alert_preview: int = DEFAULT_ALERT_PREVIEW


def _read_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"Invalid environment variable: {name}={raw!r} is not an integer.") from None
    if value < 1:
        raise RuntimeError(f"Invalid environment variable: {name} must be >= 1, got {value}.")
    return value


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""

    tz_name = os.getenv("CRM_DISPLAY_TIMEZONE") or DEFAULT_DISPLAY_TIMEZONE
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise RuntimeError(
            f"Invalid environment variable: CRM_DISPLAY_TIMEZONE={tz_name!r} is not a known timezone."
        ) from None

    return Settings(
        display_timezone=tz,
        dashboard_months=_read_positive_int("CRM_DASHBOARD_MONTHS", DEFAULT_MONTHLY_WINDOW),
        alert_preview=_read_positive_int("CRM_ALERT_PREVIEW", DEFAULT_ALERT_PREVIEW),
    )


__all__ = ["DEFAULT_ALERT_PREVIEW", "Settings", "load_settings"]
