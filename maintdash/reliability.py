"""
Reliability indicators: MTTR, MTBF, availability, target attainment, resolution rate.

Planned operating time is derived from activity: every calendar day on which a
stoppage was opened *or* a preventive execution was logged counts as one worked
shift. Both collections feed the same day set on purpose.
"""
from __future__ import annotations

import calendar as _calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Set

from .config_loader import EngineConfig
from .durations import stoppage_minutes
from .grouping import key_or_default
from .models import ExecutionRecord, Sector, StoppageEvent, normalize_status
from .periods import Interval, in_interval, period_minutes
from .timestamps import to_instant

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = ("done",)


def clamp_pct(value: float) -> float:
    return max(0.0, min(100.0, value))


def mttr(total_downtime_minutes: float, breakdown_count: int) -> float:
    if breakdown_count <= 0:
        return 0.0
    return max(0.0, total_downtime_minutes) / breakdown_count


def mtbf(planned_minutes: float, total_downtime_minutes: float, breakdown_count: int) -> float:
    if breakdown_count <= 0:
        return 0.0
    return max(0.0, (planned_minutes - total_downtime_minutes) / breakdown_count)


def availability_pct(planned_minutes: float, total_downtime_minutes: float) -> float:
    if planned_minutes <= 0:
        return 100.0
    return clamp_pct((planned_minutes - total_downtime_minutes) / planned_minutes * 100.0)


def target_attainment_pct(availability: float, target_availability: float) -> float:
    if target_availability <= 0:
        return 0.0
    return clamp_pct(round(availability / target_availability * 100.0))


def resolution_rate_pct(resolved_count: int, total_count: int) -> float:
    # an empty population counts as fully resolved
    if total_count <= 0:
        return 100.0
    return clamp_pct(resolved_count / total_count * 100.0)


def is_resolved(stoppage: StoppageEvent) -> bool:
    return normalize_status(stoppage.status) in RESOLVED_STATUSES


# ============================
# Planned operating time
# ============================
def active_days(
    stoppages: Iterable[StoppageEvent],
    executions: Iterable[ExecutionRecord],
    interval: Interval,
    tz: Optional[tzinfo] = None,
) -> Set[date]:
    days: Set[date] = set()
    for s in stoppages or []:
        t = to_instant(s.created_at, tz)
        if in_interval(t, interval):
            days.add(t.date())
    for e in executions or []:
        t = to_instant(e.executed_at, tz)
        if in_interval(t, interval):
            days.add(t.date())
    return days


def distinct_active_days(
    stoppages: Iterable[StoppageEvent],
    executions: Iterable[ExecutionRecord],
    interval: Interval,
    tz: Optional[tzinfo] = None,
) -> int:
    return len(active_days(stoppages, executions, interval, tz))


def planned_operating_minutes(
    stoppages: Iterable[StoppageEvent],
    executions: Iterable[ExecutionRecord],
    interval: Interval,
    minutes_per_shift: float,
    tz: Optional[tzinfo] = None,
) -> float:
    return distinct_active_days(stoppages, executions, interval, tz) * minutes_per_shift


@dataclass(frozen=True)
class ReliabilityFigures:
    planned_minutes: float
    downtime_minutes: float
    breakdowns: int
    mttr_minutes: float
    mtbf_minutes: float
    availability: float
    target_attainment: float


def reliability_summary(
    planned_minutes: float,
    downtime_minutes: float,
    breakdowns: int,
    target_availability: float = 98.0,
) -> ReliabilityFigures:
    availability = availability_pct(planned_minutes, downtime_minutes)
    return ReliabilityFigures(
        planned_minutes=planned_minutes,
        downtime_minutes=downtime_minutes,
        breakdowns=breakdowns,
        mttr_minutes=mttr(downtime_minutes, breakdowns),
        mtbf_minutes=mtbf(planned_minutes, downtime_minutes, breakdowns),
        availability=availability,
        target_attainment=target_attainment_pct(availability, target_availability),
    )


# ============================
# Indicator tables
# ============================
def _month_key(t: datetime) -> str:
    return f"{t.year:04d}-{t.month:02d}"


def monthly_indicators(
    stoppages: Iterable[StoppageEvent],
    executions: Iterable[ExecutionRecord],
    interval: Interval,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> List[Dict[str, Any]]:
    """
    Maintenance targets table, one row per calendar month (newest first).

    Every stoppage opened in the month is a breakdown; planned minutes come from the
    month's worked days (stoppages or executions) times the shift length.
    """
    config = config or EngineConfig()
    tz = config.calendar.tz()
    months: Dict[str, Dict[str, Any]] = {}

    def bucket(t: datetime) -> Dict[str, Any]:
        return months.setdefault(
            _month_key(t),
            {"year": t.year, "month": t.month, "days": set(), "breakdowns": 0, "downtime": 0.0},
        )

    for s in stoppages or []:
        t = to_instant(s.created_at, tz)
        if not in_interval(t, interval):
            continue
        row = bucket(t)
        row["days"].add(t.date())
        row["breakdowns"] += 1
        row["downtime"] += stoppage_minutes(s, now, tz)

    for e in executions or []:
        t = to_instant(e.executed_at, tz)
        if in_interval(t, interval):
            bucket(t)["days"].add(t.date())

    rows = []
    for key in sorted(months, reverse=True):
        row = months[key]
        planned = len(row["days"]) * config.minutes_per_shift
        figures = reliability_summary(planned, row["downtime"], row["breakdowns"], config.target_availability)
        rows.append(
            {
                "key": key,
                "year": row["year"],
                "month": config.calendar.month_abbr[row["month"] - 1],
                "worked_days": len(row["days"]),
                "planned_minutes": planned,
                "breakdowns": figures.breakdowns,
                "downtime_minutes": figures.downtime_minutes,
                "mttr_minutes": figures.mttr_minutes,
                "mtbf_minutes": figures.mtbf_minutes,
                "availability": figures.availability,
                "target_attainment": figures.target_attainment,
            }
        )
    logger.debug("Monthly indicators: %d month(s)", len(rows))
    return rows


def monthly_day_availability(
    stoppages: Iterable[StoppageEvent],
    executions: Iterable[ExecutionRecord],
    interval: Interval,
    config: Optional[EngineConfig] = None,
) -> List[Dict[str, Any]]:
    """Worked days / days in month per calendar month, against the monthly day target."""
    config = config or EngineConfig()
    tz = config.calendar.tz()
    months: Dict[str, Set[date]] = {}

    for s in stoppages or []:
        if not is_resolved(s):
            continue
        t = to_instant(s.finished_at, tz)
        if in_interval(t, interval):
            months.setdefault(_month_key(t), set()).add(t.date())

    for e in executions or []:
        t = to_instant(e.executed_at, tz)
        if in_interval(t, interval):
            months.setdefault(_month_key(t), set()).add(t.date())

    rows = []
    for key in sorted(months, reverse=True):
        year, month = int(key[:4]), int(key[5:])
        days_in_month = _calendar.monthrange(year, month)[1]
        worked = len(months[key])
        availability = clamp_pct(worked / days_in_month * 100.0)
        rows.append(
            {
                "key": key,
                "year": year,
                "month": config.calendar.month_abbr[month - 1],
                "worked_days": worked,
                "days_in_month": days_in_month,
                "availability": availability,
                "target": config.monthly_day_target,
                "target_met": availability >= config.monthly_day_target,
            }
        )
    return rows


def sector_availability(
    stoppages: Iterable[StoppageEvent],
    sectors: Iterable[Sector],
    interval: Interval,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> List[Dict[str, Any]]:
    """
    Downtime and availability per sector over the period length.

    Only stoppages opened inside `interval` count. The sector roster fixes the
    order of sectors that tie on stoppage count.
    """
    config = config or EngineConfig()
    tz = config.calendar.tz()
    available = period_minutes(interval)

    per_sector: Dict[str, Dict[str, float]] = {}
    for sector in sectors or []:
        if sector.name:
            per_sector.setdefault(sector.name, {"downtime": 0.0, "open": 0, "closed": 0, "count": 0})
    for s in stoppages or []:
        if not in_interval(to_instant(s.created_at, tz), interval):
            continue
        name = key_or_default(s.sector, config.other_label)
        row = per_sector.setdefault(name, {"downtime": 0.0, "open": 0, "closed": 0, "count": 0})
        row["downtime"] += stoppage_minutes(s, now, tz)
        row["count"] += 1
        if is_resolved(s):
            row["closed"] += 1
        else:
            row["open"] += 1

    rows = [
        {
            "name": name,
            "stoppages": int(row["count"]),
            "open": int(row["open"]),
            "closed": int(row["closed"]),
            "downtime_minutes": row["downtime"],
            "avg_minutes": mttr(row["downtime"], int(row["count"])),
            "availability": availability_pct(available, row["downtime"]),
        }
        for name, row in per_sector.items()
        if row["count"] > 0
    ]
    rows.sort(key=lambda r: r["stoppages"], reverse=True)
    return rows
