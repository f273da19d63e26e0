"""Storage backends for the context store.

Backends whose driver is optional are imported lazily by
``create_storage_adapter`` so that the in-memory backend works without them.
"""

from typing import TYPE_CHECKING

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.backends.in_memory import InMemoryStorageAdapter

if TYPE_CHECKING:
    from cortex.config import CortexSettings

__all__ = ["StorageAdapter", "InMemoryStorageAdapter", "create_storage_adapter"]


def create_storage_adapter(settings: "CortexSettings") -> StorageAdapter:
    """Build the storage adapter selected by *settings*.

    Args:
        settings: Application settings

    Returns:
        An unconnected StorageAdapter

    Raises:
        ValueError: If the configured backend is unknown
    """
    from cortex.config import BackendKind

    if settings.backend == BackendKind.MEMORY:
        return InMemoryStorageAdapter()

    if settings.backend == BackendKind.REDIS:
        from redis.asyncio import Redis

        from cortex.memory.backends.redis_backend import RedisStorageAdapter

        return RedisStorageAdapter(Redis.from_url(settings.redis_url))

    if settings.backend == BackendKind.SQL:
        from cortex.memory.backends.sql import SqlStorageAdapter
        from cortex.storage.database import Database, DatabaseConfig

        return SqlStorageAdapter(Database(DatabaseConfig(url=settings.database_url)))

    if settings.backend == BackendKind.MONGODB:
        from pymongo import AsyncMongoClient

        from cortex.memory.backends.mongodb import MongoStorageAdapter

        client: AsyncMongoClient = AsyncMongoClient(settings.mongodb_url)
        return MongoStorageAdapter(client[settings.mongodb_database], client=client)

    raise ValueError(f"Unknown storage backend: {settings.backend}")
