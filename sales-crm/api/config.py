"""
API configuration helpers.

Settings are read per request so a bad `CRM_*` value surfaces as a
configuration error, not as a store failure.

Environment variables:
- CRM_CORS_ORIGINS: comma-separated allowed origins (default "*")
- CRM_LOG_LEVEL: logging level name (default INFO)
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException

from services.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """Load settings, turning invalid configuration into an HTTP 500."""

    try:
        return load_settings()
    except RuntimeError as e:
        logger.error("Invalid configuration", extra={"error": str(e)})
        raise HTTPException(status_code=500, detail=f"Invalid configuration: {str(e)}")


def cors_origins() -> List[str]:
    raw = os.getenv("CRM_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def log_level() -> int:
    name = (os.getenv("CRM_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def local_to_utc(value: Optional[datetime], tz: ZoneInfo) -> Optional[datetime]:
    """Naive query datetimes are wall-clock times in the display timezone."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc)


__all__ = ["cors_origins", "get_settings", "local_to_utc", "log_level"]
