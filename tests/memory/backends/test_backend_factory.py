"""Tests for create_storage_adapter."""

from unittest.mock import MagicMock, patch

from cortex.config import BackendKind, CortexSettings
from cortex.memory.backends import InMemoryStorageAdapter, create_storage_adapter
from cortex.memory.backends.mongodb import MongoStorageAdapter
from cortex.memory.backends.redis_backend import RedisStorageAdapter
from cortex.memory.backends.sql import SqlStorageAdapter


class TestCreateStorageAdapter:
    def test_memory_backend(self) -> None:
        adapter = create_storage_adapter(CortexSettings(backend=BackendKind.MEMORY))
        assert isinstance(adapter, InMemoryStorageAdapter)
        assert adapter.name == "memory"

    def test_sql_backend_uses_database_url(self) -> None:
        settings = CortexSettings(backend=BackendKind.SQL, database_url="sqlite+aiosqlite:///:memory:")

        adapter = create_storage_adapter(settings)

        assert isinstance(adapter, SqlStorageAdapter)
        assert adapter.database.config.url == "sqlite+aiosqlite:///:memory:"

    def test_redis_backend_uses_redis_url(self) -> None:
        settings = CortexSettings(backend=BackendKind.REDIS, redis_url="redis://cache:6380/2")

        with patch("redis.asyncio.Redis.from_url") as from_url:
            adapter = create_storage_adapter(settings)

        assert isinstance(adapter, RedisStorageAdapter)
        from_url.assert_called_once_with("redis://cache:6380/2")
        assert adapter.redis is from_url.return_value

    def test_mongodb_backend_uses_url_and_database(self) -> None:
        settings = CortexSettings(
            backend=BackendKind.MONGODB, mongodb_url="mongodb://docs:27017", mongodb_database="ctx"
        )

        with patch("pymongo.AsyncMongoClient") as client_cls:
            client = MagicMock()
            client_cls.return_value = client
            adapter = create_storage_adapter(settings)

        assert isinstance(adapter, MongoStorageAdapter)
        client_cls.assert_called_once_with("mongodb://docs:27017")
        client.__getitem__.assert_called_once_with("ctx")
        assert adapter.client is client
