"""
Per-section aggregates of the maintenance dashboard.

Each section is filtered independently: it gets its own PeriodFilter, resolves
it against the same `now`, and returns plain numbers and series for rendering.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .buckets import (
    combine_series,
    day_of_week_distribution,
    last_4_weeks,
    last_6_months,
    last_7_days,
    period_breakdown,
)
from .config_loader import EngineConfig
from .durations import stoppage_minutes
from .grouping import (
    group_and_rank,
    group_fields,
    key_or_default,
    origin_distribution,
    priority_distribution,
    technician_hours,
)
from .models import (
    ExecutionRecord,
    PeriodFilter,
    Sector,
    Snapshot,
    StoppageEvent,
    TaskTemplate,
    WorkOrder,
    WorkOrderClosed,
    coerce_records,
    normalize_status,
)
from .oee import equipment_active_ratio, maintenance_health
from .periods import filter_by_interval, period_minutes, resolve_period, start_of_week
from .reliability import (
    availability_pct,
    is_resolved,
    monthly_day_availability,
    monthly_indicators,
    mttr,
    planned_operating_minutes,
    reliability_summary,
    resolution_rate_pct,
    sector_availability,
)
from .timestamps import local_now

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]


def _round_pct(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


# ============================
# Section models
# ============================
class StoppageSection(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    done: int = 0
    cancelled: int = 0
    open: int = 0
    completion_pct: int = 0
    resolution_rate: float = 100.0
    downtime_minutes: float = 0.0
    avg_minutes: float = 0.0
    availability: float = 100.0
    by_sector: Rows = Field(default_factory=list)
    origins: Rows = Field(default_factory=list)
    technician_hours: Rows = Field(default_factory=list)
    last_7_days: Rows = Field(default_factory=list)


class PreventiveSection(BaseModel):
    executions: int = 0
    active_templates: int = 0
    completion_pct: int = 0
    estimated_minutes: float = 0.0
    actual_minutes: float = 0.0
    avg_actual_minutes: int = 0
    by_equipment: Rows = Field(default_factory=list)
    technician_hours: Rows = Field(default_factory=list)
    by_weekday: Rows = Field(default_factory=list)
    last_4_weeks: Rows = Field(default_factory=list)


class WorkOrderSection(BaseModel):
    open: int = 0
    in_progress: int = 0
    closed: int = 0
    open_pct: int = 0
    closed_pct: int = 0
    avg_closed_minutes: int = 0
    by_sector: Rows = Field(default_factory=list)
    technician_hours: Rows = Field(default_factory=list)
    closed_by_weekday: Rows = Field(default_factory=list)


class IndicatorSection(BaseModel):
    planned_minutes: float = 0.0
    downtime_minutes: float = 0.0
    breakdowns: int = 0
    mttr_minutes: float = 0.0
    mtbf_minutes: float = 0.0
    availability: float = 100.0
    target_attainment: float = 0.0
    resolution_rate: float = 100.0
    monthly: Rows = Field(default_factory=list)
    monthly_days: Rows = Field(default_factory=list)


class SummaryTables(BaseModel):
    sector_availability: Rows = Field(default_factory=list)
    maintenance_types_week: Rows = Field(default_factory=list)
    weekday_table: Rows = Field(default_factory=list)
    total_downtime_minutes: float = 0.0


class OverviewCharts(BaseModel):
    stats: Dict[str, int] = Field(default_factory=dict)
    health: Rows = Field(default_factory=list)
    executions_by_technician: Rows = Field(default_factory=list)
    templates_by_equipment: Rows = Field(default_factory=list)
    stoppages_6_months: Rows = Field(default_factory=list)
    preventive_vs_stoppages: Rows = Field(default_factory=list)
    origins: Rows = Field(default_factory=list)
    priorities: Rows = Field(default_factory=list)
    stoppages_by_sector: Rows = Field(default_factory=list)
    stoppages_by_equipment: Rows = Field(default_factory=list)
    period_breakdown: Rows = Field(default_factory=list)
    oee_simplified: float = 0.0


class DashboardResult(BaseModel):
    generated_at: datetime
    stoppages: StoppageSection
    preventive: PreventiveSection
    work_orders: WorkOrderSection
    indicators: IndicatorSection
    tables: SummaryTables
    overview: OverviewCharts


# ============================
# Sections
# ============================
def stoppage_section(
    stoppages: Iterable[Any],
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> StoppageSection:
    config = config or EngineConfig()
    cal = config.calendar
    tz = cal.tz()
    all_stoppages = coerce_records(StoppageEvent, stoppages)
    interval = resolve_period(period, now, cal)
    items = filter_by_interval(all_stoppages, interval, lambda s: s.created_at, tz)

    counts = {"pending": 0, "in_progress": 0, "done": 0, "cancelled": 0}
    for s in items:
        status = normalize_status(s.status)
        if status in counts:
            counts[status] += 1

    downtime = sum(stoppage_minutes(s, now, tz) for s in items)
    total = len(items)
    done = [s for s in items if is_resolved(s)]

    return StoppageSection(
        total=total,
        open=total - counts["done"] - counts["cancelled"],
        completion_pct=_round_pct(counts["done"], total),
        resolution_rate=resolution_rate_pct(counts["done"], total),
        downtime_minutes=downtime,
        avg_minutes=mttr(downtime, total),
        availability=availability_pct(period_minutes(interval), downtime),
        by_sector=group_and_rank(items, lambda s: s.sector, top_n=5, fallback=config.other_label),
        origins=origin_distribution(items),
        technician_hours=technician_hours(done, lambda s: s.technician, lambda s: stoppage_minutes(s, now, tz)),
        last_7_days=last_7_days(all_stoppages, lambda s: s.created_at, now, cal),
        **counts,
    )


def preventive_section(
    executions: Iterable[Any],
    templates: Iterable[Any],
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> PreventiveSection:
    config = config or EngineConfig()
    cal = config.calendar
    all_execs = coerce_records(ExecutionRecord, executions)
    active = [t for t in coerce_records(TaskTemplate, templates) if t.active]
    items = filter_by_interval(all_execs, resolve_period(period, now, cal), lambda e: e.executed_at, cal.tz())

    timed = [e for e in items if e.actual_minutes and e.actual_minutes > 0]
    actual = sum(e.actual_minutes for e in timed)

    return PreventiveSection(
        executions=len(items),
        active_templates=len(active),
        completion_pct=min(100, _round_pct(len(items), len(active))),
        estimated_minutes=sum(max(0.0, e.estimated_minutes or 0.0) for e in items),
        actual_minutes=actual,
        avg_actual_minutes=round(actual / len(timed)) if timed else 0,
        by_equipment=group_and_rank(items, lambda e: e.equipment, top_n=8, fallback=config.other_label),
        technician_hours=technician_hours(items, lambda e: e.technician, lambda e: e.actual_minutes),
        by_weekday=day_of_week_distribution(all_execs, lambda e: e.executed_at, now, cal),
        last_4_weeks=last_4_weeks(all_execs, lambda e: e.executed_at, now, cal),
    )


def work_order_section(
    work_orders: Iterable[Any],
    closed_orders: Iterable[Any],
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> WorkOrderSection:
    config = config or EngineConfig()
    cal = config.calendar
    tz = cal.tz()
    interval = resolve_period(period, now, cal)
    all_closed = coerce_records(WorkOrderClosed, closed_orders)
    opened = filter_by_interval(coerce_records(WorkOrder, work_orders), interval, lambda o: o.created_at, tz)
    closed = filter_by_interval(all_closed, interval, lambda o: o.closed_at, tz)

    n_open = sum(1 for o in opened if normalize_status(o.status) == "open")
    n_running = sum(1 for o in opened if normalize_status(o.status) == "in_progress")
    total = n_open + n_running + len(closed)
    timed = [o.total_minutes for o in closed if o.total_minutes and o.total_minutes > 0]

    # one row per order: (sector, opened, closed)
    sector_rows = [(o.sector, 1, 0) for o in opened] + [(o.sector, 0, 1) for o in closed]

    return WorkOrderSection(
        open=n_open,
        in_progress=n_running,
        closed=len(closed),
        open_pct=_round_pct(n_open, total),
        closed_pct=_round_pct(len(closed), total),
        avg_closed_minutes=round(sum(timed) / len(timed)) if timed else 0,
        by_sector=group_fields(
            sector_rows,
            lambda r: r[0],
            {"open": lambda r: r[1], "closed": lambda r: r[2]},
            top_n=6,
            fallback=config.other_label,
        ),
        technician_hours=technician_hours(closed, lambda o: o.technician, lambda o: o.total_minutes),
        closed_by_weekday=day_of_week_distribution(all_closed, lambda o: o.closed_at, now, cal),
    )


def indicator_section(
    stoppages: Iterable[Any],
    executions: Iterable[Any],
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> IndicatorSection:
    config = config or EngineConfig()
    cal = config.calendar
    tz = cal.tz()
    all_stoppages = coerce_records(StoppageEvent, stoppages)
    all_execs = coerce_records(ExecutionRecord, executions)
    interval = resolve_period(period, now, cal)

    items = filter_by_interval(all_stoppages, interval, lambda s: s.created_at, tz)
    planned = planned_operating_minutes(all_stoppages, all_execs, interval, config.minutes_per_shift, tz)
    downtime = sum(stoppage_minutes(s, now, tz) for s in items)
    figures = reliability_summary(planned, downtime, len(items), config.target_availability)
    logger.debug("Indicators %s: planned=%s downtime=%s breakdowns=%d", period.kind, planned, downtime, len(items))

    return IndicatorSection(
        planned_minutes=figures.planned_minutes,
        downtime_minutes=figures.downtime_minutes,
        breakdowns=figures.breakdowns,
        mttr_minutes=figures.mttr_minutes,
        mtbf_minutes=figures.mtbf_minutes,
        availability=figures.availability,
        target_attainment=figures.target_attainment,
        resolution_rate=resolution_rate_pct(sum(1 for s in items if is_resolved(s)), len(items)),
        monthly=monthly_indicators(all_stoppages, all_execs, interval, now, config),
        monthly_days=monthly_day_availability(all_stoppages, all_execs, interval, config),
    )


def summary_tables(
    stoppages: Iterable[Any],
    sectors: Iterable[Any],
    executions: Iterable[Any],
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> SummaryTables:
    config = config or EngineConfig()
    cal = config.calendar
    tz = cal.tz()
    all_stoppages = coerce_records(StoppageEvent, stoppages)
    all_execs = coerce_records(ExecutionRecord, executions)
    interval = resolve_period(period, now, cal)
    items = filter_by_interval(all_stoppages, interval, lambda s: s.created_at, tz)

    week_start = start_of_week(local_now(now, tz), cal.first_weekday)
    this_week = filter_by_interval(
        all_stoppages, (week_start, week_start + timedelta(days=7)), lambda s: s.created_at, tz
    )

    def minutes(s: StoppageEvent) -> float:
        return stoppage_minutes(s, now, tz)

    weekday = combine_series(
        executions=day_of_week_distribution(all_execs, lambda e: e.executed_at, now, cal),
        stoppages=day_of_week_distribution(all_stoppages, lambda s: s.created_at, now, cal),
        minutes=day_of_week_distribution(all_stoppages, lambda s: s.created_at, now, cal, measure=minutes),
    )

    return SummaryTables(
        sector_availability=sector_availability(all_stoppages, coerce_records(Sector, sectors), interval, now, config),
        maintenance_types_week=group_fields(
            this_week,
            lambda s: s.maintenance_type,
            {"count": lambda s: 1, "minutes": minutes},
            fallback=config.other_label,
        ),
        weekday_table=weekday,
        total_downtime_minutes=sum(minutes(s) for s in items),
    )


def overview_charts(
    snapshot: Snapshot,
    period: PeriodFilter,
    now: datetime,
    config: Optional[EngineConfig] = None,
) -> OverviewCharts:
    config = config or EngineConfig()
    cal = config.calendar
    tz = cal.tz()
    other = config.other_label
    interval = resolve_period(period, now, cal)

    stoppages = filter_by_interval(snapshot.stoppages, interval, lambda s: s.created_at, tz)
    executions = filter_by_interval(snapshot.executions, interval, lambda e: e.executed_at, tz)
    active_templates = [t for t in snapshot.templates if t.active]
    statuses = [normalize_status(s.status) for s in stoppages]
    timed = [e for e in executions if e.actual_minutes and e.estimated_minutes]

    stats = {
        "templates": len(snapshot.templates),
        "active_templates": len(active_templates),
        "executions": len(executions),
        "stoppages": len(stoppages),
        "stoppages_pending": statuses.count("pending"),
        "stoppages_in_progress": statuses.count("in_progress"),
        "stoppages_done": statuses.count("done"),
        "stoppages_cancelled": statuses.count("cancelled"),
        "maintainers": len(snapshot.maintainers),
        "active_maintainers": sum(1 for m in snapshot.maintainers if m.active),
        "equipment": len(snapshot.equipment),
    }

    done = [s for s in stoppages if is_resolved(s)]
    # (technician, preventive, stoppage)
    work_rows = [(e.technician, 1, 0) for e in executions] + [(s.technician, 0, 1) for s in done]

    # custom ranges have no natural sub-buckets; show them by month days
    breakdown_kind = period.kind if period.kind != "custom" else "month"
    breakdown = combine_series(
        preventive=period_breakdown(snapshot.executions, lambda e: e.executed_at, breakdown_kind, now, cal),
        stoppages=period_breakdown(
            [s for s in snapshot.stoppages if is_resolved(s)], lambda s: s.created_at, breakdown_kind, now, cal
        ),
    )

    return OverviewCharts(
        stats=stats,
        health=maintenance_health(
            planned_tasks=len(active_templates),
            executed_tasks=len(executions),
            timed_executions=len(timed),
            on_estimate_executions=sum(1 for e in timed if e.actual_minutes <= e.estimated_minutes),
            stoppages_total=len(stoppages),
            stoppages_resolved=len(done),
            stoppages_in_progress=stats["stoppages_in_progress"],
            maintainers=snapshot.maintainers,
        ),
        executions_by_technician=group_fields(
            work_rows,
            lambda r: key_or_default(r[0], "Unassigned"),
            {"preventive": lambda r: r[1], "stoppages": lambda r: r[2]},
            top_n=10,
        ),
        templates_by_equipment=group_and_rank(snapshot.templates, lambda t: t.equipment, top_n=8, fallback=other),
        stoppages_6_months=last_6_months(snapshot.stoppages, lambda s: s.created_at, now, cal),
        preventive_vs_stoppages=combine_series(
            preventive=last_6_months(snapshot.executions, lambda e: e.executed_at, now, cal),
            stoppages=last_6_months(snapshot.stoppages, lambda s: s.created_at, now, cal),
        ),
        origins=origin_distribution(stoppages),
        priorities=priority_distribution(snapshot.templates),
        stoppages_by_sector=group_and_rank(stoppages, lambda s: s.sector, top_n=6, fallback=other),
        stoppages_by_equipment=group_and_rank(stoppages, lambda s: s.equipment, top_n=8, fallback=other),
        period_breakdown=breakdown,
        oee_simplified=equipment_active_ratio(snapshot.equipment),
    )


def build_dashboard(
    snapshot: Snapshot,
    now: datetime,
    config: Optional[EngineConfig] = None,
    filters: Optional[Dict[str, PeriodFilter]] = None,
) -> DashboardResult:
    """All sections at once; `filters` overrides the configured filter per section."""
    config = config or EngineConfig()
    chosen = dict(config.sections)
    chosen.update(filters or {})

    def flt(name: str) -> PeriodFilter:
        return chosen.get(name) or PeriodFilter(kind="month")

    return DashboardResult(
        generated_at=local_now(now, config.calendar.tz()),
        stoppages=stoppage_section(snapshot.stoppages, flt("stoppages"), now, config),
        preventive=preventive_section(snapshot.executions, snapshot.templates, flt("preventive"), now, config),
        work_orders=work_order_section(snapshot.work_orders, snapshot.work_orders_closed, flt("work_orders"), now, config),
        indicators=indicator_section(snapshot.stoppages, snapshot.executions, flt("indicators"), now, config),
        tables=summary_tables(snapshot.stoppages, snapshot.sectors, snapshot.executions, flt("tables"), now, config),
        overview=overview_charts(snapshot, flt("overview"), now, config),
    )
