"""Abstract storage adapter interface for the memory module."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from cortex.memory.types import ContextRecord


class StorageAdapter(ABC):
    """Persistence contract consumed by ContextStore.

    Implementations store exactly the record they are given: versioning and
    timestamps are computed by the store, never by the adapter. Genuine
    backend failures should surface as StorageAdapterError.
    """

    name: str = "abstract"

    @abstractmethod
    async def get(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        """Read a record. Returns None if missing; never raises for absence."""

    @abstractmethod
    async def set(self, record: ContextRecord[Any]) -> ContextRecord[Any]:
        """Create or replace a record and return the stored version."""

    @abstractmethod
    async def delete(self, tenant_id: str, context_id: str) -> None:
        """Remove a record. Deleting a missing record is not an error."""

    async def connect(self) -> None:
        """Open backend connections. Called by the application, not the store."""

    async def init(self) -> None:
        """Prepare backend structures such as tables. Called once at startup."""

    async def disconnect(self) -> None:
        """Release backend connections. Called by the application, not the store."""

    async def health_check(self) -> bool:
        """Check backend connectivity.

        Returns:
            True if the backend is reachable

        Raises:
            StorageAdapterError: If the backend cannot be reached
        """
        return True
