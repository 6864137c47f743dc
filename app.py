# app.py
import logging
import os
from datetime import date, datetime, time, timedelta

import streamlit as st

from maintdash.config_loader import EngineConfig, load_engine_config
from maintdash.dashboard import build_dashboard
from maintdash.errors import ConfigError, MaintDashError
from maintdash.frames import ranking_to_frame, rows_to_frame, series_to_frame
from maintdash.logging_conf import configure_logging
from maintdash.models import PeriodFilter
from maintdash.providers import get_provider
from maintdash.timestamps import local_now

logger = logging.getLogger("maintdash.app")

PERIOD_LABELS = {
    "today": "Today",
    "week": "This week",
    "month": "This month",
    "year": "This year",
    "custom": "Custom range",
}


# ============================
# Helpers
# ============================
def fmt_minutes(minutes: float) -> str:
    minutes = int(round(minutes or 0))
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60:02d}m"


def period_picker(section: str, default: PeriodFilter) -> PeriodFilter:
    """Sidebar selector for one section's period; custom ranges use two date inputs."""
    kinds = list(PERIOD_LABELS)
    kind = st.sidebar.selectbox(
        section.replace("_", " ").capitalize(),
        kinds,
        index=kinds.index(default.kind),
        format_func=PERIOD_LABELS.get,
        key=f"period_{section}",
    )
    if kind != "custom":
        return PeriodFilter(kind=kind)

    today = date.today()
    picked = st.sidebar.date_input(
        "Range",
        value=(today.replace(day=1), today),
        key=f"range_{section}",
    )
    # a single date while the user is still picking the second one
    start, end = (picked[0], picked[-1]) if picked else (today, today)
    # the end date is inclusive in the picker
    return PeriodFilter.custom(datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min))


# ============================
# App
# ============================
st.set_page_config(page_title="Maintenance Dashboard", layout="wide")

config_path = os.environ.get("MAINTDASH_CONFIG", "config/dashboard.yaml")
try:
    cfg = load_engine_config(config_path)
except FileNotFoundError:
    cfg = EngineConfig()
except ConfigError as e:
    st.error(str(e))
    st.stop()

configure_logging(cfg.log_level)

st.title("Maintenance dashboard")
st.caption(f"Data source: **{cfg.provider}**. Planned time = worked days × {cfg.minutes_per_shift:g} min.")

try:
    provider = get_provider(cfg.provider)
except ValueError as e:
    st.error(str(e))
    st.info("Valid providers: mock | mock_basic")
    st.stop()

now = local_now(None, cfg.calendar.tz())
snapshot = provider.get_snapshot(now)

st.sidebar.header("Periods")
filters = {name: period_picker(name, flt) for name, flt in cfg.sections.items()}

try:
    result = build_dashboard(snapshot, now, cfg, filters)
except MaintDashError as e:
    st.error(f"Invalid filter: {e}")
    st.stop()

logger.info("Dashboard built for %s", now.isoformat(timespec="minutes"))

# ----------------------------
# Stoppages
# ----------------------------
s = result.stoppages
st.subheader("Stoppages")
c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("Total", s.total)
c2.metric("Open", s.open)
c3.metric("Done", f"{s.done} ({s.completion_pct}%)")
c4.metric("Downtime", fmt_minutes(s.downtime_minutes))
c5.metric("Avg stoppage", fmt_minutes(s.avg_minutes))

left, mid, right = st.columns(3)
with left:
    st.caption("Last 7 days")
    st.bar_chart(series_to_frame(s.last_7_days, "stoppages"))
with mid:
    st.caption("Top sectors")
    st.bar_chart(ranking_to_frame(s.by_sector, "stoppages"))
with right:
    st.caption("Origin")
    st.bar_chart(ranking_to_frame(s.origins, "stoppages"))

# ----------------------------
# Preventive
# ----------------------------
p = result.preventive
st.divider()
st.subheader("Preventive maintenance")
c1, c2, c3, c4 = st.columns(4)
c1.metric("Executions", p.executions)
c2.metric("Active plans", p.active_templates)
c3.metric("Completion", f"{p.completion_pct}%")
c4.metric("Avg actual time", fmt_minutes(p.avg_actual_minutes))

left, right = st.columns(2)
with left:
    st.caption("Last 4 weeks")
    st.line_chart(series_to_frame(p.last_4_weeks, "executions"))
with right:
    st.caption("This week by weekday")
    st.bar_chart(series_to_frame(p.by_weekday, "executions"))
st.dataframe(rows_to_frame(p.technician_hours, index="name"), use_container_width=True)

# ----------------------------
# Work orders
# ----------------------------
w = result.work_orders
st.divider()
st.subheader("Work orders")
c1, c2, c3, c4 = st.columns(4)
c1.metric("Open", f"{w.open} ({w.open_pct}%)")
c2.metric("In progress", w.in_progress)
c3.metric("Closed", f"{w.closed} ({w.closed_pct}%)")
c4.metric("Avg closing time", fmt_minutes(w.avg_closed_minutes))
st.bar_chart(rows_to_frame(w.by_sector, index="name")[["open", "closed"]] if w.by_sector else rows_to_frame([]))

# ----------------------------
# Indicators
# ----------------------------
ind = result.indicators
st.divider()
st.subheader("Reliability indicators")
c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("MTTR", fmt_minutes(ind.mttr_minutes))
c2.metric("MTBF", fmt_minutes(ind.mtbf_minutes))
c3.metric("Availability", f"{ind.availability:.1f}%")
c4.metric(f"Target ({cfg.target_availability:g}%)", f"{ind.target_attainment:.0f}%")
c5.metric("Resolution rate", f"{ind.resolution_rate:.0f}%")
st.dataframe(rows_to_frame(ind.monthly, index="key"), use_container_width=True)
st.dataframe(rows_to_frame(ind.monthly_days, index="key"), use_container_width=True)

# ----------------------------
# Tables
# ----------------------------
t = result.tables
st.divider()
st.subheader("Summary tables")
left, right = st.columns(2)
with left:
    st.caption(f"Availability by sector (downtime {fmt_minutes(t.total_downtime_minutes)})")
    st.dataframe(rows_to_frame(t.sector_availability, index="name"), use_container_width=True)
with right:
    st.caption("Maintenance types this week")
    st.dataframe(rows_to_frame(t.maintenance_types_week, index="name"), use_container_width=True)
st.dataframe(rows_to_frame(t.weekday_table, index="label"), use_container_width=True)

# ----------------------------
# Overview
# ----------------------------
o = result.overview
st.divider()
st.subheader("Overview")
c1, c2, c3 = st.columns(3)
c1.metric("OEE (simplified)", f"{o.oee_simplified:.0f}%")
c2.metric("Maintainers active", f"{o.stats.get('active_maintainers', 0)}/{o.stats.get('maintainers', 0)}")
c3.metric("Equipment", o.stats.get("equipment", 0))

left, right = st.columns(2)
with left:
    st.caption("Health")
    st.bar_chart(rows_to_frame(o.health, index="subject"))
    st.caption("Preventive vs stoppages, last 6 months")
    st.line_chart(rows_to_frame(o.preventive_vs_stoppages, index="label"))
with right:
    st.caption("Period breakdown")
    st.bar_chart(rows_to_frame(o.period_breakdown, index="label"))
    st.caption("Plans by priority")
    st.bar_chart(ranking_to_frame(o.priorities, "plans"))
