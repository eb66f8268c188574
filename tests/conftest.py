"""Pytest configuration and fixtures."""
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from goal_tracker.database import get_storage
from goal_tracker.main import app
from goal_tracker.storage import InMemoryStorage
from goal_tracker.utils.clock import get_clock


class FakeClock:
    """Settable clock; calling it returns the current fake time."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, moment: datetime) -> None:
        self.moment = moment


@pytest.fixture
def clock():
    """Clock pinned to Monday 2026-10-19 09:00."""
    return FakeClock(datetime(2026, 10, 19, 9, 0))


@pytest.fixture
def storage():
    """Fresh in-memory storage."""
    return InMemoryStorage()


@pytest_asyncio.fixture
async def app_client(storage, clock):
    """
    Create a test client backed by in-memory storage and a fake clock.

    This fixture:
    - Overrides the storage and clock dependencies
    - Yields an async HTTP client for testing
    - Clears the overrides afterwards
    """
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
