from __future__ import annotations
from .base import SnapshotProvider
from .mock import MockBasicProvider, MockStandardProvider

def get_provider(provider_name: str) -> SnapshotProvider:
    if provider_name in ("mock", "mock_standard"):
        return MockStandardProvider()
    if provider_name == "mock_basic":
        return MockBasicProvider()
    raise ValueError(f"Unknown provider: {provider_name}")
