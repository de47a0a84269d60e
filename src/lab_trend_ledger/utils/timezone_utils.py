"""
Timezone and datetime utilities.

Provides the default clock and helpers for timezone-aware datetime handling.
"""

from collections.abc import Callable
from datetime import datetime

import pytz
from dateutil import parser
from dateutil.relativedelta import relativedelta

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current instant as a timezone-aware UTC datetime."""
    return datetime.now(pytz.utc)


def make_timezone_aware(
    dt: datetime, timezone_str: str = "UTC", assume_local: bool = False
) -> datetime:
    """
    Make a datetime object timezone-aware.

    Args:
        dt: Datetime object (may be naive or aware).
        timezone_str: Timezone string (e.g., "Europe/Moscow").
        assume_local: If True and dt is naive, assume it's in timezone_str.

    Returns:
        Timezone-aware datetime object.
    """
    tz = pytz.timezone(timezone_str)

    if dt.tzinfo is None:
        if assume_local:
            return tz.localize(dt)
        else:
            return pytz.utc.localize(dt).astimezone(tz)
    else:
        return dt.astimezone(tz)


def parse_datetime(value: str, timezone_str: str = "UTC") -> datetime:
    """
    Parse a date or datetime string into a timezone-aware datetime.

    Strings without an offset are interpreted in timezone_str.
    """
    dt = parser.parse(value)
    return make_timezone_aware(dt, timezone_str, assume_local=True)


def format_display_date(
    timestamp: datetime, date_format: str = "%b %y", timezone_str: str = "UTC"
) -> str:
    """
    Render a timestamp as the short label shown on charts and result lists.

    Args:
        timestamp: Timezone-aware timestamp.
        date_format: strftime format (locale dependent for month names).
        timezone_str: Timezone the label is rendered in.

    Returns:
        Formatted date label.
    """
    return make_timezone_aware(timestamp, timezone_str).strftime(date_format)


def months_before(moment: datetime, months: int) -> datetime:
    """Return the instant lying the given number of calendar months before moment."""
    return moment - relativedelta(months=months)
