from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DATE_FORMAT, TIME_FORMAT


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into a time of day."""
    value = value.strip()
    fmt = TIME_FORMAT if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value, fmt).time()


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_clock(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(TIME_FORMAT)


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current local wall-clock time (naive).

    Note: Wrapped so tests can patch/mock easier.
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()
