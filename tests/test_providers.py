"""Tests for the demo snapshot providers."""
import pytest

from maintdash.models import Snapshot
from maintdash.providers import MockBasicProvider, MockStandardProvider, get_provider


def test_get_provider():
    assert isinstance(get_provider("mock"), MockStandardProvider)
    assert isinstance(get_provider("mock_basic"), MockBasicProvider)


def test_unknown_provider():
    with pytest.raises(ValueError):
        get_provider("sap")


def test_snapshot_is_deterministic(now):
    provider = get_provider("mock")
    first = provider.get_snapshot(now)
    assert isinstance(first, Snapshot)
    assert first == provider.get_snapshot(now)
    assert first.stoppages and first.executions and first.templates


def test_basic_profile_has_no_instants(now):
    snapshot = get_provider("mock_basic").get_snapshot(now)
    assert all(s.finished_at is None for s in snapshot.stoppages)
    assert all(s.start_time and s.end_time for s in snapshot.stoppages)


def test_demo_data_stays_in_the_past(now):
    snapshot = get_provider("mock").get_snapshot(now)
    assert all(s.created_at <= now for s in snapshot.stoppages)
