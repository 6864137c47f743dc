from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from .models import PRIORITIES, StoppageEvent, TaskTemplate

T = TypeVar("T")

OTHER = "Other"
UNIDENTIFIED = "Unidentified"

ORIGIN_LABELS: Dict[str, str] = {
    "electrical": "Electrical",
    "mechanical": "Mechanical",
    "automation": "Automation",
    "third_party": "Third party",
    "other": "Other",
}


def key_or_default(value: Any, fallback: str = OTHER) -> str:
    """Grouping key for a raw field; absent or blank values collapse to `fallback`."""
    if value is None:
        return fallback
    text = str(value).strip()
    return text if text else fallback


def as_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def group_and_rank(
    records: Iterable[T],
    key: Callable[[T], Any],
    measure: Optional[Callable[[T], Any]] = None,
    top_n: Optional[int] = None,
    fallback: str = OTHER,
) -> List[Dict[str, Any]]:
    """
    Sum `measure` (count by default) per key and rank descending.

    Ties keep first-seen order. The total before truncation always equals the
    sum of the measure over `records`.
    """
    totals: Dict[str, float] = {}
    for rec in records or []:
        name = key_or_default(key(rec), fallback)
        value = 1 if measure is None else as_number(measure(rec))
        totals[name] = totals.get(name, 0) + value

    ranked = sorted(
        ({"name": name, "value": value} for name, value in totals.items()),
        key=lambda row: row["value"],
        reverse=True,
    )
    if top_n is not None:
        ranked = ranked[: max(0, top_n)]
    return ranked


def group_fields(
    records: Iterable[T],
    key: Callable[[T], Any],
    fields: Mapping[str, Callable[[T], Any]],
    top_n: Optional[int] = None,
    fallback: str = OTHER,
) -> List[Dict[str, Any]]:
    """Several measures per group: ``{"name", <field>..., "total"}``, ranked by total."""
    groups: Dict[str, Dict[str, float]] = {}
    for rec in records or []:
        name = key_or_default(key(rec), fallback)
        row = groups.setdefault(name, {f: 0 for f in fields})
        for f, fn in fields.items():
            row[f] += as_number(fn(rec))

    ranked = sorted(
        ({"name": name, **row, "total": sum(row.values())} for name, row in groups.items()),
        key=lambda row: row["total"],
        reverse=True,
    )
    if top_n is not None:
        ranked = ranked[: max(0, top_n)]
    return ranked


def origin_distribution(stoppages: Iterable[StoppageEvent]) -> List[Dict[str, Any]]:
    """One count per raised origin flag (a stoppage can have several); zero rows dropped."""
    counts = {label: 0 for label in ORIGIN_LABELS.values()}
    for s in stoppages or []:
        if s.origin is None:
            continue
        for flag, label in ORIGIN_LABELS.items():
            if getattr(s.origin, flag, False):
                counts[label] += 1
    return [{"name": name, "value": value} for name, value in counts.items() if value > 0]


def priority_distribution(templates: Iterable[TaskTemplate]) -> List[Dict[str, Any]]:
    """Active templates per priority, critical first; unknown priorities count as low."""
    counts = {p: 0 for p in PRIORITIES}
    for t in templates or []:
        if not t.active:
            continue
        priority = key_or_default(t.priority, "low").lower()
        counts[priority if priority in counts else "low"] += 1
    return [{"name": p, "value": v} for p, v in counts.items() if v > 0]


def technician_hours(
    records: Iterable[T],
    technician: Callable[[T], Any],
    minutes: Callable[[T], Any],
    top_n: Optional[int] = 6,
) -> List[Dict[str, Any]]:
    """Hours appropriation per technician; records without a technician are left out."""
    per_tech: Dict[str, Dict[str, float]] = {}
    for rec in records or []:
        name = key_or_default(technician(rec), UNIDENTIFIED)
        row = per_tech.setdefault(name, {"total": 0.0, "count": 0})
        row["total"] += max(0.0, as_number(minutes(rec)))
        row["count"] += 1

    rows = [
        {
            "name": name,
            "hours": round(row["total"] / 60.0, 1),
            "count": int(row["count"]),
            "avg_minutes": round(row["total"] / row["count"]) if row["count"] else 0,
        }
        for name, row in per_tech.items()
        if name != UNIDENTIFIED
    ]
    rows.sort(key=lambda r: r["hours"], reverse=True)
    if top_n is not None:
        rows = rows[: max(0, top_n)]
    return rows
