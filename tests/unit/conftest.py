"""Unit test fixtures (fakes, mocks and stubs).

Provides a manual clock and a recording sleep so timing behavior can be
asserted without real waits, plus cache mocks.
"""

import pytest
from unittest.mock import AsyncMock


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that records requested delays and advances a clock."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.clock.advance(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


@pytest.fixture
def manual_clock() -> ManualClock:
    """Manual clock starting at t=1000s."""
    return ManualClock()


@pytest.fixture
def recording_sleep(manual_clock: ManualClock) -> RecordingSleep:
    """Sleep replacement wired to manual_clock."""
    return RecordingSleep(manual_clock)


@pytest.fixture
def mock_cache():
    """Mock cache store (async get/set), empty by default."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    return mock
