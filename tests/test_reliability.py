"""Tests for MTTR/MTBF/availability and the indicator tables."""
from datetime import datetime

import pytest

from maintdash.config_loader import EngineConfig
from maintdash.models import Sector
from maintdash.reliability import (
    availability_pct,
    distinct_active_days,
    monthly_day_availability,
    monthly_indicators,
    mtbf,
    mttr,
    planned_operating_minutes,
    reliability_summary,
    resolution_rate_pct,
    sector_availability,
    target_attainment_pct,
)

YEAR = (datetime(2026, 1, 1), datetime(2026, 10, 15, 14, 30))


def test_zero_breakdowns_guard():
    assert mttr(120, 0) == 0
    assert mtbf(480, 120, 0) == 0


def test_mttr_mtbf():
    assert mttr(100, 3) == pytest.approx(33.333, rel=1e-3)
    assert mtbf(960, 60, 3) == 300
    # downtime beyond planned time is not a negative duration
    assert mtbf(100, 400, 2) == 0


def test_availability():
    assert availability_pct(0, 50) == 100
    assert availability_pct(480, 48) == pytest.approx(90)
    assert availability_pct(480, 960) == 0


def test_resolution_rate_of_empty_population_is_full():
    assert resolution_rate_pct(0, 0) == 100
    assert resolution_rate_pct(1, 4) == 25


def test_target_attainment():
    assert target_attainment_pct(98, 98) == 100
    assert target_attainment_pct(49, 98) == 50
    assert target_attainment_pct(100, 98) == 100
    assert target_attainment_pct(90, 0) == 0


def test_planned_minutes_from_distinct_days(make_stoppage, make_execution):
    stoppages = [
        make_stoppage(created_at=datetime(2026, 10, 1, 9, 0)),
        make_stoppage(created_at=datetime(2026, 10, 1, 15, 0)),
        make_stoppage(created_at=datetime(2025, 12, 31, 9, 0)),  # outside
    ]
    executions = [
        make_execution(executed_at=datetime(2026, 10, 1, 10, 0)),
        make_execution(executed_at=datetime(2026, 10, 2, 10, 0)),
        make_execution(executed_at=None),
    ]
    assert distinct_active_days(stoppages, executions, YEAR) == 2
    assert planned_operating_minutes(stoppages, executions, YEAR, 480) == 960


def test_reliability_summary():
    figures = reliability_summary(960, 96, 2, target_availability=98.0)
    assert figures.mttr_minutes == 48
    assert figures.mtbf_minutes == 432
    assert figures.availability == pytest.approx(90)
    assert figures.target_attainment == 92


def test_monthly_indicators(make_stoppage, make_execution, now):
    stoppages = [
        make_stoppage(created_at=datetime(2026, 10, 1, 9, 0), duration_minutes=30, status="done"),
        make_stoppage(created_at=datetime(2026, 10, 2, 9, 0), duration_minutes=30, status="done"),
        make_stoppage(created_at=datetime(2026, 9, 10, 9, 0), duration_minutes=48, status="done"),
    ]
    executions = [make_execution(executed_at=datetime(2026, 10, 3, 9, 0))]
    rows = monthly_indicators(stoppages, executions, YEAR, now)

    assert [r["key"] for r in rows] == ["2026-10", "2026-09"]
    october, september = rows
    assert october["month"] == "Oct"
    assert october["worked_days"] == 3
    assert october["planned_minutes"] == 1440
    assert october["breakdowns"] == 2
    assert october["mttr_minutes"] == 30
    assert september["availability"] == pytest.approx(90)


def test_monthly_day_availability(make_stoppage, make_execution):
    stoppages = [
        make_stoppage(status="done", finished_at=datetime(2026, 9, 1, 10, 0)),
        make_stoppage(status="pending", finished_at=datetime(2026, 9, 2, 10, 0)),
    ]
    executions = [make_execution(executed_at=datetime(2026, 9, d, 8, 0)) for d in range(1, 26)]
    rows = monthly_day_availability(stoppages, executions, YEAR)
    assert len(rows) == 1
    row = rows[0]
    assert row["worked_days"] == 25
    assert row["days_in_month"] == 30
    assert row["availability"] == pytest.approx(83.333, rel=1e-3)
    assert row["target_met"] is True


def test_sector_availability(make_stoppage, now):
    interval = (datetime(2026, 10, 15), now)  # 870 minutes
    stoppages = [
        make_stoppage(sector="Press", created_at=datetime(2026, 10, 15, 9, 0), duration_minutes=87, status="done"),
        make_stoppage(sector="Press", created_at=datetime(2026, 10, 15, 10, 0), duration_minutes=87),
        make_stoppage(sector="Paint", created_at=datetime(2026, 10, 15, 11, 0), duration_minutes=10),
        make_stoppage(sector="Paint", created_at=datetime(2026, 10, 1, 11, 0), duration_minutes=10),
    ]
    sectors = [Sector(id="1", name="Welding"), Sector(id="2", name="Paint"), Sector(id="3", name="Press")]
    rows = sector_availability(stoppages, sectors, interval, now, EngineConfig())

    assert [r["name"] for r in rows] == ["Press", "Paint"]
    press = rows[0]
    assert press["stoppages"] == 2
    assert press["open"] == 1 and press["closed"] == 1
    assert press["avg_minutes"] == 87
    assert press["availability"] == pytest.approx(80.0)
