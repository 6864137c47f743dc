"""Maintenance dashboard analytics: period filtering, bucketing, rankings and reliability indicators."""
from __future__ import annotations

from .config_loader import CalendarConfig, EngineConfig, load_config, load_engine_config
from .dashboard import (
    DashboardResult,
    build_dashboard,
    indicator_section,
    overview_charts,
    preventive_section,
    stoppage_section,
    summary_tables,
    work_order_section,
)
from .errors import ConfigError, InvalidPeriod, MaintDashError
from .models import PeriodFilter, Snapshot, snapshot_from_dicts
from .periods import filter_by_period, resolve_period
from .timestamps import to_instant

__all__ = [
    "CalendarConfig",
    "ConfigError",
    "DashboardResult",
    "EngineConfig",
    "InvalidPeriod",
    "MaintDashError",
    "PeriodFilter",
    "Snapshot",
    "build_dashboard",
    "filter_by_period",
    "indicator_section",
    "load_config",
    "load_engine_config",
    "overview_charts",
    "preventive_section",
    "resolve_period",
    "snapshot_from_dicts",
    "stoppage_section",
    "summary_tables",
    "to_instant",
    "work_order_section",
]
