"""Pytest configuration and shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.types import ContextMetadata, ContextRecord
from cortex.storage.database import Database, DatabaseConfig

pytest_plugins = ["pytest_asyncio"]

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock advancing by a fixed step on every reading."""

    def __init__(self, start: datetime = EPOCH, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now


def make_record(
    tenant_id: str = "tenant-1",
    context_id: str = "ctx-1",
    data: Any = None,
    version: int = 1,
    **metadata: Any,
) -> ContextRecord[Any]:
    """Build a record with sensible defaults for adapter tests."""
    fields: dict[str, Any] = {
        "created_at": EPOCH,
        "updated_at": EPOCH,
        "version": version,
        "size_bytes": 13,
    }
    fields.update(metadata)
    return ContextRecord(
        tenant_id=tenant_id,
        context_id=context_id,
        data={"foo": "bar"} if data is None else data,
        metadata=ContextMetadata(**fields),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def record_factory():
    """Return the make_record helper."""
    return make_record


@pytest.fixture
def mock_adapter() -> AsyncMock:
    """StorageAdapter double that stores nothing and echoes writes back."""
    adapter = AsyncMock(spec=StorageAdapter)
    adapter.name = "mock"
    adapter.get.return_value = None
    adapter.set.side_effect = lambda record: record
    return adapter


@pytest.fixture
async def test_db() -> AsyncGenerator[Database, None]:
    """In-memory SQLite database with the contexts table created."""
    db = Database(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await db.create_tables()
    yield db
    await db.close()
