from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Hashable, Iterable, List, Optional, Tuple, TypeVar

from .config_loader import CalendarConfig
from .errors import InvalidPeriod
from .models import PeriodFilter
from .timestamps import local_now, start_of_day, to_instant

logger = logging.getLogger(__name__)

T = TypeVar("T")
Interval = Tuple[datetime, datetime]


def start_of_week(dt: datetime, first_weekday: int = 0) -> datetime:
    back = (dt.weekday() - first_weekday) % 7
    return start_of_day(dt) - timedelta(days=back)


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)


def add_months(dt: datetime, months: int) -> datetime:
    """First day of the month `months` away from dt's month."""
    idx = dt.year * 12 + (dt.month - 1) + months
    return start_of_month(dt).replace(year=idx // 12, month=idx % 12 + 1)


def resolve_period(
    period: PeriodFilter,
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
) -> Interval:
    """
    Concrete half-open [start, end) interval for a period filter.

    Named periods are period-to-date: the end bound is `now`, not the end of the
    nominal day/week/month/year.
    """
    calendar = calendar or CalendarConfig()
    tz = calendar.tz()
    now = local_now(now, tz)

    if period.kind == "today":
        return start_of_day(now), now
    if period.kind == "week":
        return start_of_week(now, calendar.first_weekday), now
    if period.kind == "month":
        return start_of_month(now), now
    if period.kind == "year":
        return start_of_day(now).replace(month=1, day=1), now

    # custom
    start = to_instant(period.start, tz)
    end = to_instant(period.end, tz)
    if start is None or end is None:
        logger.warning("Custom period without usable bounds: start=%r end=%r", period.start, period.end)
        raise InvalidPeriod("custom period requires both start and end")
    return start, end


def period_minutes(interval: Interval) -> int:
    """Elapsed minutes of an interval, rounded up; 0 for empty/inverted intervals."""
    start, end = interval
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(math.ceil(seconds / 60.0))


def period_cache_key(
    period: PeriodFilter,
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
) -> Hashable:
    """
    Key for memoising aggregates per (filter, time bucket).

    Named periods depend on the wall clock, so they are keyed by the current local
    day and the week layout; custom ranges are fully determined by their bounds.
    """
    calendar = calendar or CalendarConfig()
    tz = calendar.tz()
    if period.kind == "custom":
        return ("custom", to_instant(period.start, tz), to_instant(period.end, tz))
    return (period.kind, local_now(now, tz).date(), calendar.first_weekday)


def in_interval(instant: Optional[datetime], interval: Interval) -> bool:
    if instant is None:
        return False
    start, end = interval
    return start <= instant < end


def filter_by_interval(
    records: Iterable[T],
    interval: Interval,
    accessor: Callable[[T], Any],
    tz: Optional[tzinfo] = None,
) -> List[T]:
    """Records whose accessor instant falls in [start, end); order preserved."""
    out: List[T] = []
    dropped = 0
    for rec in records or []:
        if in_interval(to_instant(accessor(rec), tz), interval):
            out.append(rec)
        else:
            dropped += 1
    if dropped:
        logger.debug("filter_by_interval: kept %d, dropped %d", len(out), dropped)
    return out


def filter_by_period(
    records: Iterable[T],
    period: PeriodFilter,
    accessor: Callable[[T], Any],
    now: datetime,
    calendar: Optional[CalendarConfig] = None,
) -> List[T]:
    calendar = calendar or CalendarConfig()
    interval = resolve_period(period, now, calendar)
    return filter_by_interval(records, interval, accessor, calendar.tz())
