from __future__ import annotations

from typing import Dict, Iterable, List

from .models import Equipment, Maintainer, normalize_status


def _pct(part: float, whole: float, empty: float) -> float:
    if whole <= 0:
        return empty
    return max(0.0, min(100.0, part / whole * 100.0))


def is_equipment_active(e: Equipment) -> bool:
    if e.status:
        return normalize_status(e.status) == "active"
    return bool(e.active)


def equipment_active_ratio(equipment: Iterable[Equipment]) -> float:
    """Simplified OEE: share of registered equipment currently in service."""
    items = list(equipment or [])
    active = sum(1 for e in items if is_equipment_active(e))
    return _pct(active, len(items), 0.0)


def team_availability(maintainers: Iterable[Maintainer]) -> float:
    items = list(maintainers or [])
    return _pct(sum(1 for m in items if m.active), len(items), 0.0)


def maintenance_health(
    planned_tasks: int,
    executed_tasks: int,
    timed_executions: int,
    on_estimate_executions: int,
    stoppages_total: int,
    stoppages_resolved: int,
    stoppages_in_progress: int,
    maintainers: Iterable[Maintainer],
) -> List[Dict[str, float]]:
    """
    Five-axis health radar.

    Live availability drops 10 points per stoppage still being worked on.
    """
    return [
        {"subject": "Completion", "value": _pct(executed_tasks, planned_tasks, 0.0)},
        {"subject": "On estimate", "value": _pct(on_estimate_executions, timed_executions, 100.0)},
        {"subject": "Stoppages resolved", "value": _pct(stoppages_resolved, stoppages_total, 0.0)},
        {"subject": "Team", "value": team_availability(maintainers)},
        {"subject": "Availability", "value": max(0.0, 100.0 - stoppages_in_progress * 10.0)},
    ]
