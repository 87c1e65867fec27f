"""
Pytest fixtures for settings, partition storage, and the HTTP client.

Every test gets its own temporary data directory, so partitions start from a
freshly seeded 2 x 6 layout (1A..1F, 2A..2F).
"""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from seatbooking.main import app
from seatbooking.api.dependencies import get_registry
from seatbooking.core.config import Settings
from seatbooking.db.session import create_partition_engine
from seatbooking.services.partition import PartitionRegistry
from seatbooking.services.seat_store import SeatStore
from seatbooking.services.subscriber_hub import SubscriberHub

FLIGHT_ID = "LH-2024"


class FakeConnection:
    """Stands in for a WebSocket; records every payload pushed to it."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.sent: list[str] = []
        self.fail = fail
        self.delay = delay

    async def send_text(self, data: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(data)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(DATA_DIR=str(tmp_path / "data"), SEAT_ROWS=2, SEAT_COLUMNS=6)


@pytest.fixture
def store(settings: Settings):
    """An initialized seat store for one flight."""
    seat_store = SeatStore(
        create_partition_engine(settings, FLIGHT_ID),
        rows=settings.SEAT_ROWS,
        columns=settings.SEAT_COLUMNS,
    )
    seat_store.initialize()
    yield seat_store
    seat_store.close()


@pytest.fixture
def hub(store: SeatStore) -> SubscriberHub:
    return SubscriberHub(store, send_timeout=0.5)


@pytest_asyncio.fixture(scope="function")
async def registry(settings: Settings) -> AsyncGenerator[PartitionRegistry, None]:
    partitions = PartitionRegistry(settings)
    yield partitions
    await partitions.close()


@pytest_asyncio.fixture(scope="function")
async def client(registry: PartitionRegistry) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the partition registry with the test one."""

    async def override_get_registry():
        return registry

    app.dependency_overrides[get_registry] = override_get_registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_connection():
    return FakeConnection
