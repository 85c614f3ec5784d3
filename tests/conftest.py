"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from ctmap.application.record_store import RecordStore
from ctmap.tools.seed_data import seed_records

FIXED_NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; `advance` moves it forward."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def seeded_store(clock):
    return RecordStore(*seed_records(clock()), clock=clock)
