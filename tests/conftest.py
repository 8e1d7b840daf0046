"""Shared pytest fixtures."""

from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Controllable time source."""
    
    def __init__(self, start: datetime):
        self.now = start
    
    def __call__(self) -> datetime:
        return self.now
    
    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant."""
    return FakeClock(datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc))
