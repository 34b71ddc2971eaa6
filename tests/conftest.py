"""
Shared test fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest

TZ = timezone(timedelta(hours=2))


class FakeClock:
    """Controllable clock returning timezone-aware datetimes."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 14, 10, 0, tzinfo=TZ))
