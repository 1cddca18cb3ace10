"""
Utility helpers.
"""

from .dates import (
    utc_now, ensure_utc, parse_timestamp, to_iso, format_date, format_datetime,
    format_time, relative_time, is_today, is_this_week, start_of_day, end_of_day,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "parse_timestamp",
    "to_iso",
    "format_date",
    "format_datetime",
    "format_time",
    "relative_time",
    "is_today",
    "is_this_week",
    "start_of_day",
    "end_of_day",
]
