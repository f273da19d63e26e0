"""In-memory storage backend.

Scoped by tenant. Not durable across process restarts; records never
expire (ttl is kept as metadata only). Records are deep-copied on the way
in and out, so later changes to a caller's payload never reach the store.
"""

import asyncio
from typing import Any, Optional

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.types import ContextRecord
from cortex.observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryStorageAdapter(StorageAdapter):
    """Dictionary-backed adapter guarded by an asyncio lock.

    Suitable for development, testing, and single-process deployments.

    Attributes:
        _storage: tenant_id -> {context_id: ContextRecord}
        _lock: Asyncio lock serialising access to _storage
    """

    name = "memory"

    def __init__(self) -> None:
        self._storage: dict[str, dict[str, ContextRecord[Any]]] = {}
        self._lock = asyncio.Lock()

    async def disconnect(self) -> None:
        async with self._lock:
            self._storage.clear()
        logger.info("storage_disconnected", backend=self.name)

    async def get(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        async with self._lock:
            record = self._storage.get(tenant_id, {}).get(context_id)
        return record.model_copy(deep=True) if record is not None else None

    async def set(self, record: ContextRecord[Any]) -> ContextRecord[Any]:
        async with self._lock:
            self._storage.setdefault(record.tenant_id, {})[record.context_id] = record.model_copy(
                deep=True
            )
        return record

    async def delete(self, tenant_id: str, context_id: str) -> None:
        async with self._lock:
            contexts = self._storage.get(tenant_id)
            if contexts is None:
                return
            contexts.pop(context_id, None)
            if not contexts:
                del self._storage[tenant_id]
