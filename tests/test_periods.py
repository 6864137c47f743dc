"""Tests for period resolution and temporal filtering."""
from datetime import datetime, timedelta, timezone

import pytest

from maintdash.config_loader import CalendarConfig
from maintdash.errors import InvalidPeriod, MaintDashError
from maintdash.models import PeriodFilter
from maintdash.periods import (
    add_months,
    filter_by_interval,
    filter_by_period,
    period_cache_key,
    period_minutes,
    resolve_period,
    start_of_week,
)


def test_named_periods_are_period_to_date(now):
    assert resolve_period(PeriodFilter.today(), now) == (datetime(2026, 10, 15), now)
    assert resolve_period(PeriodFilter.week(), now) == (datetime(2026, 10, 12), now)
    assert resolve_period(PeriodFilter.month(), now) == (datetime(2026, 10, 1), now)
    assert resolve_period(PeriodFilter.year(), now) == (datetime(2026, 1, 1), now)


def test_week_start_follows_calendar(now):
    sunday_first = CalendarConfig(first_weekday=6)
    assert resolve_period(PeriodFilter.week(), now, sunday_first)[0] == datetime(2026, 10, 11)
    assert start_of_week(datetime(2026, 10, 12, 9, 0)) == datetime(2026, 10, 12)


def test_custom_period_uses_given_bounds(now):
    period = PeriodFilter.custom("2026-09-01", datetime(2026, 9, 15, 12, 0))
    assert resolve_period(period, now) == (datetime(2026, 9, 1), datetime(2026, 9, 15, 12, 0))


def test_custom_period_without_bounds_raises(now):
    with pytest.raises(InvalidPeriod):
        resolve_period(PeriodFilter.custom(datetime(2026, 9, 1), None), now)
    with pytest.raises(MaintDashError):
        resolve_period(PeriodFilter.custom("garbage", "2026-09-02"), now)
    # still a ValueError for callers that only know the builtin
    with pytest.raises(ValueError):
        resolve_period(PeriodFilter(kind="custom"), now)


def test_boundary_start_included_end_excluded(now):
    """Test that a record exactly at start is kept and one exactly at end is dropped."""
    start, end = datetime(2026, 10, 1), datetime(2026, 10, 2)
    records = [
        {"at": start},
        {"at": end - timedelta(microseconds=1)},
        {"at": end},
        {"at": start - timedelta(seconds=1)},
    ]
    kept = filter_by_interval(records, (start, end), lambda r: r["at"])
    assert kept == records[:2]


def test_records_without_timestamp_are_excluded(now):
    records = [{"at": None}, {"at": "bad"}, {"at": datetime(2026, 10, 15, 9, 0)}]
    kept = filter_by_period(records, PeriodFilter.today(), lambda r: r["at"], now)
    assert kept == [records[2]]


def test_inverted_custom_range_is_empty(now):
    period = PeriodFilter.custom(datetime(2026, 10, 10), datetime(2026, 10, 1))
    records = [{"at": datetime(2026, 10, 5)}]
    assert filter_by_period(records, period, lambda r: r["at"], now) == []
    assert period_minutes(resolve_period(period, now)) == 0


def test_period_minutes_rounds_up():
    start = datetime(2026, 10, 15)
    assert period_minutes((start, start + timedelta(seconds=90))) == 2
    assert period_minutes((start, start + timedelta(hours=8))) == 480
    assert period_minutes((start, start)) == 0


def test_cache_key(now):
    assert period_cache_key(PeriodFilter.month(), now) == ("month", now.date(), 0)
    assert period_cache_key(PeriodFilter.month(), now) != period_cache_key(
        PeriodFilter.month(), now + timedelta(days=1)
    )
    custom = PeriodFilter.custom("2026-09-01", "2026-09-30")
    assert period_cache_key(custom, now) == ("custom", datetime(2026, 9, 1), datetime(2026, 9, 30))


def test_cache_key_follows_local_day():
    """Test that the key changes when the calendar's local day does, not the UTC day."""
    calendar = CalendarConfig(timezone="America/Sao_Paulo")
    before = datetime(2026, 10, 16, 2, 0, tzinfo=timezone.utc)  # 23:00 on the 15th locally
    after = datetime(2026, 10, 16, 4, 0, tzinfo=timezone.utc)  # 01:00 on the 16th locally

    assert resolve_period(PeriodFilter.today(), before, calendar)[0] == datetime(2026, 10, 15)
    assert resolve_period(PeriodFilter.today(), after, calendar)[0] == datetime(2026, 10, 16)
    assert period_cache_key(PeriodFilter.today(), before, calendar) != period_cache_key(
        PeriodFilter.today(), after, calendar
    )
    assert period_cache_key(PeriodFilter.today(), before, calendar)[1] == datetime(2026, 10, 15).date()


def test_cache_key_includes_week_layout(now):
    """Test that a different first weekday yields a different key."""
    monday = period_cache_key(PeriodFilter.week(), now, CalendarConfig(first_weekday=0))
    sunday = period_cache_key(PeriodFilter.week(), now, CalendarConfig(first_weekday=6))
    assert monday != sunday


def test_add_months_crosses_years():
    assert add_months(datetime(2026, 1, 15, 10, 0), -1) == datetime(2025, 12, 1)
    assert add_months(datetime(2026, 11, 30), 2) == datetime(2027, 1, 1)
    assert add_months(datetime(2026, 10, 15), 0) == datetime(2026, 10, 1)
