"""Tests for the date helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from coursekeeper.util import dates

NOW = datetime(2024, 10, 2, 12, 0, tzinfo=timezone.utc)  # a Wednesday


def test_ensure_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2024, 10, 2, 14, 0, tzinfo=plus_two)
    assert dates.ensure_utc(value) == NOW
    assert dates.ensure_utc(value).tzinfo == timezone.utc


def test_parse_timestamp():
    assert dates.parse_timestamp(None) is None
    assert dates.parse_timestamp("") is None
    assert dates.parse_timestamp("2024-10-02T12:00:00+00:00") == NOW
    assert dates.parse_timestamp("2024-10-02T12:00:00") == NOW
    assert dates.parse_timestamp(NOW) is not None


def test_to_iso_is_fixed_width():
    assert dates.to_iso(NOW) == "2024-10-02T12:00:00.000000+00:00"
    assert dates.to_iso(None) is None


def test_whole_units_truncate_toward_zero():
    assert dates.whole_hours_between(NOW, NOW + timedelta(hours=10, minutes=59)) == 10
    assert dates.whole_hours_between(NOW, NOW - timedelta(minutes=90)) == -1
    assert dates.whole_days_between(NOW, NOW + timedelta(hours=50)) == 2


@pytest.mark.parametrize("offset, expected", [
    (timedelta(days=-3), "3 day(s) ago"),
    (timedelta(hours=-5), "5 hour(s) ago"),
    (timedelta(minutes=20), "Due now"),
    (timedelta(hours=4), "In 4 hour(s)"),
    (timedelta(hours=30), "Tomorrow"),
    (timedelta(days=5), "In 5 days"),
    (timedelta(days=20), "Oct 22, 2024"),
])
def test_relative_time(offset, expected):
    assert dates.relative_time(NOW + offset, now=NOW) == expected


def test_formatting():
    assert dates.format_date(NOW) == "Oct 02, 2024"
    assert dates.format_datetime(NOW) == "Oct 02, 2024 12:00"
    assert dates.format_time(NOW) == "12:00"
    assert dates.format_date(None) == ""


def test_today_and_week():
    assert dates.is_today(NOW.replace(hour=1), now=NOW)
    assert not dates.is_today(NOW + timedelta(days=1), now=NOW)
    assert dates.is_this_week(datetime(2024, 9, 30, tzinfo=timezone.utc), now=NOW)
    assert dates.is_this_week(datetime(2024, 10, 6, 23, 0, tzinfo=timezone.utc), now=NOW)
    assert not dates.is_this_week(datetime(2024, 10, 7, tzinfo=timezone.utc), now=NOW)


def test_day_bounds():
    day = date(2024, 10, 2)
    assert dates.start_of_day(day) == datetime(2024, 10, 2, tzinfo=timezone.utc)
    assert dates.end_of_day(day) == datetime(2024, 10, 2, 23, 59, 59, tzinfo=timezone.utc)
