"""
Fixed-shape time series for trend charts.

Every series is seeded with all of its labels at zero before accumulating, so the
output always has the same length and order regardless of the input. Records
outside a series' lookback window are dropped without complaint.
"""
from __future__ import annotations

import calendar as _calendar
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .config_loader import CalendarConfig
from .grouping import as_number
from .periods import Interval, add_months, start_of_week
from .timestamps import local_now, start_of_day, to_instant

T = TypeVar("T")
Measure = Optional[Callable[[Any], Any]]

# (label, [start, end))
_Bucket = Tuple[str, datetime, datetime]


def _accumulate(
    buckets: Sequence[_Bucket],
    records: Iterable[T],
    accessor: Callable[[T], Any],
    measure: Measure,
    cal: CalendarConfig,
) -> List[Dict[str, Any]]:
    values = [0] * len(buckets)
    if buckets:
        lo, hi = buckets[0][1], buckets[-1][2]
        tz = cal.tz()
        for rec in records or []:
            t = to_instant(accessor(rec), tz)
            if t is None or not (lo <= t < hi):
                continue
            for i, (_label, start, end) in enumerate(buckets):
                if start <= t < end:
                    values[i] += 1 if measure is None else as_number(measure(rec))
                    break
    return [{"label": label, "value": v} for (label, _s, _e), v in zip(buckets, values)]


def last_7_days(
    records: Iterable[T],
    accessor: Callable[[T], Any],
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
    measure: Measure = None,
) -> List[Dict[str, Any]]:
    """The 7 calendar days ending today, oldest first, labelled by weekday short name."""
    cal = calendar or CalendarConfig()
    today = start_of_day(local_now(now, cal.tz()))
    buckets = []
    for back in range(6, -1, -1):
        day = today - timedelta(days=back)
        buckets.append((cal.weekday_short[day.weekday()], day, day + timedelta(days=1)))
    return _accumulate(buckets, records, accessor, measure, cal)


def last_4_weeks(
    records: Iterable[T],
    accessor: Callable[[T], Any],
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
    measure: Measure = None,
) -> List[Dict[str, Any]]:
    """Four consecutive 7-day blocks ending today; "Week 1" is the oldest."""
    cal = calendar or CalendarConfig()
    tomorrow = start_of_day(local_now(now, cal.tz())) + timedelta(days=1)
    buckets = []
    for n in range(1, 5):
        end = tomorrow - timedelta(days=7 * (4 - n))
        buckets.append((cal.week_label.format(n=n), end - timedelta(days=7), end))
    return _accumulate(buckets, records, accessor, measure, cal)


def last_6_months(
    records: Iterable[T],
    accessor: Callable[[T], Any],
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
    measure: Measure = None,
) -> List[Dict[str, Any]]:
    """Current calendar month and the 5 before it, labelled by month abbreviation."""
    cal = calendar or CalendarConfig()
    now = local_now(now, cal.tz())
    buckets = []
    for back in range(5, -1, -1):
        start = add_months(now, -back)
        buckets.append((cal.month_abbr[start.month - 1], start, add_months(start, 1)))
    return _accumulate(buckets, records, accessor, measure, cal)


def day_of_week_distribution(
    records: Iterable[T],
    accessor: Callable[[T], Any],
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
    measure: Measure = None,
    interval: Optional[Interval] = None,
) -> List[Dict[str, Any]]:
    """
    Totals per weekday name, always Monday first.

    Defaults to the current full calendar week; pass `interval` to distribute an
    arbitrary range instead.
    """
    cal = calendar or CalendarConfig()
    tz = cal.tz()
    if interval is None:
        start = start_of_week(local_now(now, tz), cal.first_weekday)
        interval = (start, start + timedelta(days=7))
    lo, hi = interval

    values = [0] * 7  # indexed by datetime.weekday(), Monday = 0
    for rec in records or []:
        t = to_instant(accessor(rec), tz)
        if t is None or not (lo <= t < hi):
            continue
        values[t.weekday()] += 1 if measure is None else as_number(measure(rec))
    return [{"label": cal.weekday_names[i], "value": values[i]} for i in range(7)]


def period_breakdown(
    records: Iterable[T],
    accessor: Callable[[T], Any],
    period_kind: str,
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
    measure: Measure = None,
) -> List[Dict[str, Any]]:
    """
    Sub-buckets of the current named period: hours of today, days of this week,
    days of this month or months of this year.
    """
    cal = calendar or CalendarConfig()
    now = local_now(now, cal.tz())
    today = start_of_day(now)

    if period_kind == "today":
        buckets = [(f"{h}h", today + timedelta(hours=h), today + timedelta(hours=h + 1)) for h in range(24)]
    elif period_kind == "week":
        monday = start_of_week(now, cal.first_weekday)
        buckets = []
        for d in range(7):
            day = monday + timedelta(days=d)
            buckets.append((cal.weekday_short[day.weekday()], day, day + timedelta(days=1)))
    elif period_kind == "month":
        first = today.replace(day=1)
        days = _calendar.monthrange(first.year, first.month)[1]
        buckets = [
            (str(d + 1), first + timedelta(days=d), first + timedelta(days=d + 1)) for d in range(days)
        ]
    elif period_kind == "year":
        jan = today.replace(month=1, day=1)
        buckets = [(cal.month_abbr[m], add_months(jan, m), add_months(jan, m + 1)) for m in range(12)]
    else:
        raise ValueError(f"Unknown period kind for breakdown: {period_kind}")
    return _accumulate(buckets, records, accessor, measure, cal)


def combine_series(**series: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Zip parallel bucket series sharing the same labels into one row per label."""
    rows: List[Dict[str, Any]] = []
    for name, points in series.items():
        for i, point in enumerate(points):
            if i == len(rows):
                rows.append({"label": point["label"]})
            rows[i][name] = point["value"]
    return rows
