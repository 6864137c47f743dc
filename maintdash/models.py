from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Type, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

PeriodKind = Literal["today", "week", "month", "year", "custom"]

# Timestamp-like: wrapper object | datetime/date | ISO text | None.
# Interpreted only by maintdash.timestamps.to_instant.
TimestampLike = Any

PRIORITIES: List[str] = ["critical", "high", "medium", "low"]


def normalize_status(value: Any) -> str:
    """Status as compared everywhere: trimmed, lower-case, "" when absent."""
    return str(value or "").strip().lower()


def _member_types(annotation: Any) -> tuple:
    args = get_args(annotation)
    return tuple(a for a in (args or (annotation,)) if a is not type(None))


def _loose_number(value: Any, integral: bool) -> Any:
    """Blank or unparseable numbers read as absent."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if integral:
        return int(number) if number.is_integer() else None
    return number


class Record(BaseModel):
    # fetch layer hands over whatever the document holds; unknown keys are ignored
    model_config = ConfigDict(extra="ignore", frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="before")
    @classmethod
    def _loosen(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            if name not in data:
                continue
            value = data[name]
            types = _member_types(field.annotation)
            if bool in types:
                # null flag -> field default
                if value is None:
                    del data[name]
            elif float in types or int in types:
                data[name] = _loose_number(value, integral=float not in types)
            elif str in types:
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    data[name] = str(value)
            elif any(isinstance(t, type) and issubclass(t, BaseModel) for t in types):
                if value is not None and not isinstance(value, (Mapping, BaseModel)):
                    data[name] = None
        return data


class StoppageOrigin(Record):
    electrical: bool = False
    mechanical: bool = False
    automation: bool = False
    third_party: bool = False
    other: bool = False


class StoppageEvent(Record):
    id: str
    sector: Optional[str] = None
    equipment: Optional[str] = None
    maintenance_type: Optional[str] = None
    status: Optional[str] = None  # pending | in_progress | done | cancelled
    origin: Optional[StoppageOrigin] = None
    technician: Optional[str] = None

    duration_minutes: Optional[float] = None
    created_at: TimestampLike = None
    finished_at: TimestampLike = None
    start_time: Optional[str] = None  # "HH:mm"
    end_time: Optional[str] = None  # "HH:mm"


class ExecutionRecord(Record):
    id: str
    executed_at: TimestampLike = None
    estimated_minutes: Optional[float] = None
    actual_minutes: Optional[float] = None
    technician: Optional[str] = None
    equipment: Optional[str] = None


class WorkOrder(Record):
    id: str
    status: Optional[str] = None  # open | in_progress
    sector: Optional[str] = None
    equipment: Optional[str] = None
    technician: Optional[str] = None
    created_at: TimestampLike = None


class WorkOrderClosed(Record):
    id: str
    status: Optional[str] = "closed"
    sector: Optional[str] = None
    equipment: Optional[str] = None
    technician: Optional[str] = None
    closed_at: TimestampLike = None
    total_minutes: Optional[float] = None


class TaskTemplate(Record):
    id: str
    active: bool = True
    priority: Optional[str] = None  # critical | high | medium | low
    period_label: Optional[str] = None
    equipment: Optional[str] = None
    maintenance_type: Optional[str] = None
    sector: Optional[str] = None
    estimated_minutes: Optional[float] = None


class Equipment(Record):
    id: str
    name: Optional[str] = None
    sector: Optional[str] = None
    status: Optional[str] = None  # active | inactive | maintenance
    active: bool = True


class Sector(Record):
    id: str
    name: Optional[str] = None
    unit: Optional[str] = None
    active: bool = True


class Maintainer(Record):
    id: str
    name: Optional[str] = None
    active: bool = True
    daily_capacity_minutes: Optional[float] = None
    priority_order: Optional[int] = None


class PeriodFilter(BaseModel):
    """Named period (period-to-date) or an explicit [start, end) range."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: PeriodKind = "month"
    start: TimestampLike = None
    end: TimestampLike = None

    @classmethod
    def today(cls) -> "PeriodFilter":
        return cls(kind="today")

    @classmethod
    def week(cls) -> "PeriodFilter":
        return cls(kind="week")

    @classmethod
    def month(cls) -> "PeriodFilter":
        return cls(kind="month")

    @classmethod
    def year(cls) -> "PeriodFilter":
        return cls(kind="year")

    @classmethod
    def custom(cls, start: TimestampLike, end: TimestampLike) -> "PeriodFilter":
        return cls(kind="custom", start=start, end=end)


class Snapshot(BaseModel):
    """Everything the fetch layer hands over for one dashboard render."""

    stoppages: List[StoppageEvent] = Field(default_factory=list)
    executions: List[ExecutionRecord] = Field(default_factory=list)
    work_orders: List[WorkOrder] = Field(default_factory=list)
    work_orders_closed: List[WorkOrderClosed] = Field(default_factory=list)
    templates: List[TaskTemplate] = Field(default_factory=list)
    equipment: List[Equipment] = Field(default_factory=list)
    sectors: List[Sector] = Field(default_factory=list)
    maintainers: List[Maintainer] = Field(default_factory=list)


M = TypeVar("M", bound=BaseModel)


def coerce_records(model: Type[M], rows: Iterable[Any]) -> List[M]:
    """
    Validate plain dicts into `model`; instances of `model` pass through.

    A row that still fails validation (no id, wrong container type) is logged and
    left out so that one broken document doesn't take down a whole section.
    """
    out: List[M] = []
    for row in rows or []:
        if isinstance(row, model):
            out.append(row)
            continue
        try:
            data = row.model_dump() if isinstance(row, BaseModel) else row
            out.append(model.model_validate(data))
        except ValidationError as e:
            logger.warning("Skipping invalid %s record: %s", model.__name__, e.errors(include_url=False))
    return out


def snapshot_from_dicts(data: Dict[str, Iterable[Any]]) -> Snapshot:
    return Snapshot(
        stoppages=coerce_records(StoppageEvent, data.get("stoppages", [])),
        executions=coerce_records(ExecutionRecord, data.get("executions", [])),
        work_orders=coerce_records(WorkOrder, data.get("work_orders", [])),
        work_orders_closed=coerce_records(WorkOrderClosed, data.get("work_orders_closed", [])),
        templates=coerce_records(TaskTemplate, data.get("templates", [])),
        equipment=coerce_records(Equipment, data.get("equipment", [])),
        sectors=coerce_records(Sector, data.get("sectors", [])),
        maintainers=coerce_records(Maintainer, data.get("maintainers", [])),
    )
