from __future__ import annotations

from datetime import tzinfo
from pathlib import Path
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .models import PeriodFilter


class CalendarConfig(BaseModel):
    """Labels and week layout used for buckets; nothing is read from the OS locale."""

    timezone: Optional[str] = None
    first_weekday: int = Field(default=0, ge=0, le=6)  # 0 = Monday
    # Monday-first, like datetime.weekday()
    weekday_names: List[str] = Field(
        default_factory=lambda: ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    )
    weekday_short: List[str] = Field(default_factory=lambda: ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"])
    month_abbr: List[str] = Field(
        default_factory=lambda: ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    )
    week_label: str = "Week {n}"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {v}") from e
        return v

    @field_validator("weekday_names", "weekday_short")
    @classmethod
    def _seven_days(cls, v: List[str]) -> List[str]:
        if len(v) != 7:
            raise ValueError(f"expected 7 weekday labels, got {len(v)}")
        return v

    @field_validator("month_abbr")
    @classmethod
    def _twelve_months(cls, v: List[str]) -> List[str]:
        if len(v) != 12:
            raise ValueError(f"expected 12 month labels, got {len(v)}")
        return v

    def tz(self) -> Optional[tzinfo]:
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)


class EngineConfig(BaseModel):
    minutes_per_shift: float = Field(default=8 * 60, ge=0)
    target_availability: float = 98.0
    monthly_day_target: float = 80.0
    other_label: str = "Other"
    provider: str = "mock"
    log_level: str = "INFO"
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    # default filter per dashboard section
    sections: Dict[str, PeriodFilter] = Field(
        default_factory=lambda: {
            name: PeriodFilter(kind="month")
            for name in ("stoppages", "preventive", "work_orders", "indicators", "tables", "overview")
        }
    )


def load_config(config_path: str) -> dict:
    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got: {type(data).__name__}")
    return data


def load_engine_config(config_path: str) -> EngineConfig:
    data = load_config(config_path)
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e
