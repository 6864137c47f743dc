"""Shared fixtures: a fixed clock and record factories."""
from datetime import datetime

import pytest

from maintdash.config_loader import EngineConfig
from maintdash.models import ExecutionRecord, StoppageEvent

# Thursday, mid-afternoon
NOW = datetime(2026, 10, 15, 14, 30)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def make_stoppage():
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        fields.setdefault("id", f"P{counter['n']}")
        return StoppageEvent(**fields)

    return _make


@pytest.fixture
def make_execution():
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        fields.setdefault("id", f"E{counter['n']}")
        return ExecutionRecord(**fields)

    return _make
