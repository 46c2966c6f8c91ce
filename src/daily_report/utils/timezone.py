# src/daily_report/utils/timezone.py
from __future__ import annotations

import logging
from datetime import datetime, date

import pytz

from src.daily_report.config import settings

# -----------------------------------------------------------------------------
# Configure local timezone with fallback
# -----------------------------------------------------------------------------
try:
    LOCAL_TZ = pytz.timezone(settings.TIMEZONE)
except pytz.UnknownTimeZoneError as exc:
    logging.getLogger(__name__).warning(
        "Invalid TIMEZONE '%s' in environment; falling back to Asia/Tokyo. Error: %s",
        settings.TIMEZONE,
        exc,
    )
    LOCAL_TZ = pytz.timezone("Asia/Tokyo")


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------
def now_local() -> datetime:
    """
    Return the current time as a timezone-aware datetime in the configured local timezone.
    """
    return datetime.now(LOCAL_TZ)


def now_naive() -> datetime:
    """Local wall-clock time without tzinfo, the way timestamps are stored."""
    return now_local().replace(tzinfo=None)


def today_local() -> date:
    """
    Return the current date in the configured local timezone.
    """
    return now_local().date()
