from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..models import Snapshot


class SnapshotProvider(ABC):
    @abstractmethod
    def get_snapshot(self, now: datetime) -> Snapshot:
        ...
