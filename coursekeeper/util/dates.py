"""
Date and time helpers shared by the domain model, persistence and services.

All timestamps inside CourseKeeper are timezone-aware UTC. Naive values coming
from callers are interpreted as UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

DATE_FORMAT = "%b %d, %Y"
DATETIME_FORMAT = "%b %d, %Y %H:%M"
TIME_FORMAT = "%H:%M"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime) into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value))


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as a fixed-width ISO-8601 UTC string."""
    if value is None:
        return None
    return ensure_utc(value).isoformat(timespec="microseconds")


def format_date(value: Optional[Union[date, datetime]]) -> str:
    return value.strftime(DATE_FORMAT) if value is not None else ""


def format_datetime(value: Optional[datetime]) -> str:
    return value.strftime(DATETIME_FORMAT) if value is not None else ""


def format_time(value: Optional[datetime]) -> str:
    return value.strftime(TIME_FORMAT) if value is not None else ""


def whole_hours_between(start: datetime, end: datetime) -> int:
    """Whole hours from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 3600)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 86400)


def relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human friendly distance between ``now`` and ``value``."""
    if value is None:
        return ""

    now = ensure_utc(now) if now else utc_now()
    value = ensure_utc(value)
    days = whole_days_between(now, value)
    hours = whole_hours_between(now, value)

    if days < 0:
        return f"{abs(days)} day(s) ago"
    if days == 0:
        if hours < 0:
            return f"{abs(hours)} hour(s) ago"
        if hours == 0:
            return "Due now"
        return f"In {hours} hour(s)"
    if days == 1:
        return "Tomorrow"
    if days <= 7:
        return f"In {days} days"
    return format_date(value)


def is_today(value: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if value is None:
        return False
    now = ensure_utc(now) if now else utc_now()
    return ensure_utc(value).date() == now.date()


def is_this_week(value: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True when ``value`` falls in the Monday-to-Sunday week containing ``now``."""
    if value is None:
        return False
    today = (ensure_utc(now) if now else utc_now()).date()
    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)
    return week_start <= ensure_utc(value).date() <= week_end


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)
