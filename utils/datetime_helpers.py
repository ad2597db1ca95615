"""Timezone-aware date/time helpers for the reservation service.

Instants are stored as naive wall-clock time in the configured timezone,
formatted as fixed-width ISO strings so that string comparison in SQL
matches chronological order.
"""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from flask import current_app

STORAGE_FORMAT = '%Y-%m-%dT%H:%M:%S'


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Asia/Jakarta')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current local datetime (naive, configured timezone)."""
    return datetime.now(get_timezone()).replace(tzinfo=None, microsecond=0)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        value = value.astimezone(get_timezone()).replace(tzinfo=None)
    return value.replace(microsecond=0)


def format_datetime(value: datetime) -> str:
    """Format a datetime for storage and JSON output."""
    return value.strftime(STORAGE_FORMAT)


def parse_stored_datetime(value: str) -> datetime:
    """Parse a datetime string written by format_datetime."""
    return datetime.strptime(value, STORAGE_FORMAT)


def parse_time_of_day(value: str) -> time:
    """Parse 'HH:MM' into a time."""
    hours, minutes = value.split(':')
    return time(int(hours), int(minutes))
