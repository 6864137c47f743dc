from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import List, Literal, Optional

from .models import (
    Equipment,
    ExecutionRecord,
    Maintainer,
    Sector,
    Snapshot,
    StoppageEvent,
    StoppageOrigin,
    TaskTemplate,
    WorkOrder,
    WorkOrderClosed,
)

Profile = Literal["BASIC", "STANDARD"]

SECTORS = ["Press", "Welding", "Paint", "Assembly", "Utilities"]
EQUIPMENT = [
    ("EQ-PRS-1", "Hydraulic press 1", "Press"),
    ("EQ-PRS-2", "Hydraulic press 2", "Press"),
    ("EQ-WLD-1", "Welding robot", "Welding"),
    ("EQ-PNT-1", "Paint booth", "Paint"),
    ("EQ-ASM-1", "Assembly conveyor", "Assembly"),
    ("EQ-UTL-1", "Air compressor", "Utilities"),
]
TECHNICIANS = ["Ana Lima", "Bruno Costa", "Carla Dias", "Diego Alves"]
MAINTENANCE_TYPES = ["Corrective", "Preventive", "Predictive"]
PRIORITY_CYCLE = ["critical", "high", "medium", "low", "medium", "high"]

# origin flags cycle: electrical, mechanical, automation, third party, mechanical+electrical
_ORIGINS = [
    StoppageOrigin(electrical=True),
    StoppageOrigin(mechanical=True),
    StoppageOrigin(automation=True),
    StoppageOrigin(third_party=True),
    StoppageOrigin(mechanical=True, electrical=True),
]


def _shift_start(day: datetime) -> datetime:
    return datetime.combine(day.date(), time(8, 0))


def get_mock_roster() -> tuple:
    sectors = [Sector(id=f"S{i + 1}", name=name, unit="Plant 1") for i, name in enumerate(SECTORS)]
    equipment = [
        # the compressor is out for overhaul in the demo
        Equipment(id=eq_id, name=name, sector=sector, status="maintenance" if eq_id == "EQ-UTL-1" else "active")
        for eq_id, name, sector in EQUIPMENT
    ]
    maintainers = [
        Maintainer(id=f"M{i + 1}", name=name, active=(i != 3), daily_capacity_minutes=480, priority_order=i + 1)
        for i, name in enumerate(TECHNICIANS)
    ]
    return sectors, equipment, maintainers


def get_mock_templates() -> List[TaskTemplate]:
    return [
        TaskTemplate(
            id=f"T{i + 1}",
            active=(i % 7 != 6),
            priority=PRIORITY_CYCLE[i % len(PRIORITY_CYCLE)],
            period_label="monthly" if i % 2 else "weekly",
            equipment=EQUIPMENT[i % len(EQUIPMENT)][1],
            sector=EQUIPMENT[i % len(EQUIPMENT)][2],
            maintenance_type="Preventive",
            estimated_minutes=30 + 15 * (i % 4),
        )
        for i in range(14)
    ]


def get_mock_stoppages(now: datetime, profile: Profile = "STANDARD", days: int = 120) -> List[StoppageEvent]:
    """
    Stoppages spread over the last `days` days, roughly one every other day.

    BASIC mimics manual entry: no instants, only HH:mm texts and sometimes an
    explicit duration. STANDARD carries created/finished instants.
    """
    stoppages: List[StoppageEvent] = []
    for i in range(0, days, 2):
        day = _shift_start(now - timedelta(days=i))
        eq_id, eq_name, sector = EQUIPMENT[i % len(EQUIPMENT)]
        start = day + timedelta(hours=1 + i % 6, minutes=(i * 7) % 60)
        minutes = 15 + (i * 13) % 90
        end = start + timedelta(minutes=minutes)

        # the most recent ones are still being worked on
        if i == 0:
            status = "in_progress"
        elif i == 2:
            status = "pending"
        elif i % 19 == 0:
            status = "cancelled"
        else:
            status = "done"

        finished_at: Optional[datetime] = end if status == "done" else None
        stoppages.append(
            StoppageEvent(
                id=f"P{i:03d}",
                sector=sector,
                equipment=eq_name,
                maintenance_type=MAINTENANCE_TYPES[i % 5 % 3],
                status=status,
                origin=_ORIGINS[i % len(_ORIGINS)],
                technician=TECHNICIANS[i % len(TECHNICIANS)] if i % 11 else None,
                duration_minutes=minutes if (profile == "BASIC" and i % 4 == 0) else None,
                created_at=start if profile == "STANDARD" else start.date(),
                finished_at=finished_at if profile == "STANDARD" else None,
                start_time=start.strftime("%H:%M"),
                end_time=end.strftime("%H:%M"),
            )
        )
    return stoppages


def get_mock_executions(now: datetime, days: int = 120) -> List[ExecutionRecord]:
    executions: List[ExecutionRecord] = []
    for i in range(days):
        # weekends are quiet
        day = _shift_start(now - timedelta(days=i))
        if day.weekday() >= 5 or day > now:
            continue
        for j in range(1 + i % 2):
            estimated = 30 + 15 * ((i + j) % 4)
            executions.append(
                ExecutionRecord(
                    id=f"E{i:03d}{j}",
                    executed_at=day + timedelta(hours=2 + 3 * j),
                    estimated_minutes=estimated,
                    actual_minutes=estimated + ((i * 5 + j * 3) % 25) - 10,
                    technician=TECHNICIANS[(i + j) % len(TECHNICIANS)],
                    equipment=EQUIPMENT[(i + j) % len(EQUIPMENT)][1],
                )
            )
    return executions


def get_mock_work_orders(now: datetime, days: int = 60) -> tuple:
    opened: List[WorkOrder] = []
    closed: List[WorkOrderClosed] = []
    for i in range(0, days, 3):
        day = _shift_start(now - timedelta(days=i))
        sector = SECTORS[i % len(SECTORS)]
        technician = TECHNICIANS[i % len(TECHNICIANS)]
        if i < 9:
            opened.append(
                WorkOrder(
                    id=f"OS{i:03d}",
                    status="open" if i % 2 == 0 else "in_progress",
                    sector=sector,
                    equipment=EQUIPMENT[i % len(EQUIPMENT)][1],
                    technician=technician,
                    created_at=day + timedelta(hours=1),
                )
            )
        else:
            closed.append(
                WorkOrderClosed(
                    id=f"OS{i:03d}",
                    sector=sector,
                    equipment=EQUIPMENT[i % len(EQUIPMENT)][1],
                    technician=technician,
                    closed_at=day + timedelta(hours=6),
                    total_minutes=45 + (i * 11) % 120,
                )
            )
    return opened, closed


def get_mock_snapshot(now: datetime, profile: Profile = "STANDARD") -> Snapshot:
    """Deterministic demo data laid out relative to `now`."""
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)
    sectors, equipment, maintainers = get_mock_roster()
    opened, closed = get_mock_work_orders(now)
    return Snapshot(
        stoppages=get_mock_stoppages(now, profile),
        executions=get_mock_executions(now),
        work_orders=opened,
        work_orders_closed=closed,
        templates=get_mock_templates(),
        equipment=equipment,
        sectors=sectors,
        maintainers=maintainers,
    )
