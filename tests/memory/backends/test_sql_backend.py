"""Tests for SqlStorageAdapter on in-memory SQLite."""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from cortex.memory.backends.sql import SqlStorageAdapter
from cortex.memory.errors import InvalidInputError, StorageAdapterError
from cortex.memory.store import ContextStore
from cortex.memory.types import ContextStoreConfig
from cortex.storage.database import Database, DatabaseConfig, to_async_url
from cortex.storage.models import ContextModel


@pytest.fixture
async def adapter(test_db):
    """Adapter over the shared in-memory test database."""
    return SqlStorageAdapter(test_db)


class TestSqlStorageAdapter:
    """Unit tests for SqlStorageAdapter."""

    def test_requires_database(self) -> None:
        with pytest.raises(InvalidInputError):
            SqlStorageAdapter(None)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_set_and_get_round_trip(self, adapter, record_factory) -> None:
        record = record_factory("t1", "c1", data={"nested": {"list": [1, 2, None]}}, tags=["a"])

        assert await adapter.set(record) is record
        assert await adapter.get("t1", "c1") == record

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, adapter) -> None:
        assert await adapter.get("t1", "missing") is None

    @pytest.mark.asyncio
    async def test_set_upserts_existing_row(self, adapter, test_db, record_factory) -> None:
        await adapter.set(record_factory("t1", "c1", data="old", version=1))
        await adapter.set(record_factory("t1", "c1", data="new", version=2))

        stored = await adapter.get("t1", "c1")
        assert stored.data == "new"
        assert stored.metadata.version == 2

        async with test_db.session() as session:
            row = await session.get(ContextModel, ("t1", "c1"))
            assert row.data["metadata"]["version"] == 2

    @pytest.mark.asyncio
    async def test_tenants_are_isolated(self, adapter, record_factory) -> None:
        await adapter.set(record_factory("tenant-A", "c1", data="A"))
        await adapter.set(record_factory("tenant-B", "c1", data="B"))

        await adapter.delete("tenant-A", "c1")

        assert await adapter.get("tenant-A", "c1") is None
        assert (await adapter.get("tenant-B", "c1")).data == "B"

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, adapter) -> None:
        await adapter.delete("t1", "missing")

    @pytest.mark.asyncio
    async def test_health_check(self, adapter) -> None:
        assert await adapter.health_check() is True

    @pytest.mark.asyncio
    async def test_missing_table_errors_are_wrapped(self, test_db, record_factory) -> None:
        adapter = SqlStorageAdapter(test_db)
        await test_db.drop_tables()

        with pytest.raises(StorageAdapterError) as exc_info:
            await adapter.get("t1", "c1")
        assert isinstance(exc_info.value.cause, SQLAlchemyError)

        with pytest.raises(StorageAdapterError):
            await adapter.set(record_factory("t1", "c1"))

        with pytest.raises(StorageAdapterError):
            await adapter.delete("t1", "c1")

    @pytest.mark.asyncio
    async def test_init_creates_table(self, tmp_path, record_factory) -> None:
        database = Database(DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'cortex.db'}"))
        adapter = SqlStorageAdapter(database)

        await adapter.init()
        await adapter.set(record_factory("t1", "c1"))
        await adapter.disconnect()

        reopened = SqlStorageAdapter(
            Database(DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'cortex.db'}"))
        )
        assert (await reopened.get("t1", "c1")) is not None
        await reopened.disconnect()


class TestContextStoreOverSql:
    """ContextStore running its write sequence against the SQL adapter."""

    @pytest.mark.asyncio
    async def test_versioned_lifecycle(self, adapter, clock) -> None:
        store = ContextStore(adapter, ContextStoreConfig(default_ttl_seconds=60), clock=clock)

        first = await store.set_memory("t1", "c1", {"data": {"foo": "bar"}})
        second = await store.set_memory("t1", "c1", {"data": {"foo": "baz"}, "metadata": {"tags": ["x"]}})

        assert (first.metadata.version, second.metadata.version) == (1, 2)
        assert second.metadata.created_at == first.metadata.created_at
        assert await store.get_memory("t1", "c1") == second

        await store.delete_memory("t1", "c1")
        assert await store.get_memory("t1", "c1") is None


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        ("url", "driver"),
        [
            ("sqlite:///./cortex.db", "sqlite+aiosqlite"),
            ("postgresql://u:p@db/cortex", "postgresql+asyncpg"),
            ("postgres://u:p@db/cortex", "postgresql+asyncpg"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite"),
        ],
    )
    def test_plain_urls_get_async_driver(self, url: str, driver: str) -> None:
        assert to_async_url(url).drivername == driver

    def test_sync_driver_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="synchronous"):
            to_async_url("postgresql+psycopg2://u:p@db/cortex")

    def test_rendered_url_can_hide_password(self) -> None:
        rendered = to_async_url("postgresql://u:secret@db/cortex").render_as_string(hide_password=True)
        assert "secret" not in rendered
        assert rendered.startswith("postgresql+asyncpg://u:")
