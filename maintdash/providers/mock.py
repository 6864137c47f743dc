from __future__ import annotations

from datetime import datetime

from .base import SnapshotProvider
from ..data_mock import get_mock_snapshot
from ..models import Snapshot


class MockStandardProvider(SnapshotProvider):
    """Demo records with proper created/finished instants."""

    profile = "STANDARD"

    def get_snapshot(self, now: datetime) -> Snapshot:
        return get_mock_snapshot(now, self.profile)


class MockBasicProvider(MockStandardProvider):
    """Hand-entered style: dates and HH:mm texts only, some explicit durations."""

    profile = "BASIC"
