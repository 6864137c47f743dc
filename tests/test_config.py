"""Tests for YAML configuration loading."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from maintdash.config_loader import CalendarConfig, EngineConfig, load_config, load_engine_config
from maintdash.errors import ConfigError

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "dashboard.yaml"


def test_defaults():
    cfg = EngineConfig()
    assert cfg.minutes_per_shift == 480
    assert cfg.target_availability == 98.0
    assert cfg.other_label == "Other"
    assert cfg.calendar.tz() is None
    assert set(cfg.sections) == {"stoppages", "preventive", "work_orders", "indicators", "tables", "overview"}
    assert all(f.kind == "month" for f in cfg.sections.values())


def test_repo_config_loads():
    cfg = load_engine_config(str(REPO_CONFIG))
    assert cfg.provider == "mock"
    assert cfg.calendar.first_weekday == 0
    assert cfg.sections["indicators"].kind == "year"


def test_load_config_from_file(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "minutes_per_shift: 600\n"
        "calendar:\n"
        "  first_weekday: 6\n"
        "sections:\n"
        "  stoppages: {kind: custom, start: '2026-09-01', end: '2026-10-01'}\n",
        encoding="utf-8",
    )
    cfg = load_engine_config(str(path))
    assert cfg.minutes_per_shift == 600
    assert cfg.calendar.first_weekday == 6
    assert cfg.sections["stoppages"].kind == "custom"
    assert cfg.sections["stoppages"].start == "2026-09-01"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == {}
    assert load_engine_config(str(path)) == EngineConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_document(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_calendar_validation():
    with pytest.raises(ValidationError):
        CalendarConfig(weekday_names=["Mon", "Tue"])
    with pytest.raises(ValidationError):
        CalendarConfig(month_abbr=["Jan"])
    with pytest.raises(ValidationError):
        CalendarConfig(first_weekday=7)
    with pytest.raises(ValidationError):
        EngineConfig(sections={"stoppages": {"kind": "fortnight"}})


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        CalendarConfig(timezone="Nope/Zone")
    assert CalendarConfig(timezone="  ").tz() is None
    assert CalendarConfig(timezone="America/Sao_Paulo").tz() is not None


def test_unknown_timezone_in_file_is_config_error(tmp_path):
    """Test that a bad timezone surfaces at load time as ConfigError."""
    path = tmp_path / "cfg.yaml"
    path.write_text("calendar:\n  timezone: Mars/Olympus\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_engine_config(str(path))


def test_invalid_field_in_file_is_config_error(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("minutes_per_shift: -5\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_engine_config(str(path))
