"""MongoDB storage backend.

One document per record in the ``cortex_contexts`` collection::

    {"_id": {"tenant_id": <tenant_id>, "context_id": <context_id>}, "context": <wire record>}

The compound `_id` keeps every (tenant_id, context_id) pair distinct whatever
characters the identifiers contain.

Works with pymongo's AsyncMongoClient databases and any handle exposing the
same async collection API.
"""

from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.errors import InvalidInputError, StorageAdapterError
from cortex.memory.types import ContextRecord
from cortex.observability.logging import get_logger

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

logger = get_logger(__name__)

COLLECTION_NAME = "cortex_contexts"


def document_id(tenant_id: str, context_id: str) -> dict[str, str]:
    """Return the document ``_id`` of a record."""
    return {"tenant_id": tenant_id, "context_id": context_id}


class MongoStorageAdapter(StorageAdapter):
    """Adapter storing each record as one MongoDB document.

    Example:
        >>> from pymongo import AsyncMongoClient
        >>> client = AsyncMongoClient("mongodb://localhost:27017")
        >>> adapter = MongoStorageAdapter(client["cortex"], client=client)
    """

    name = "mongodb"

    def __init__(
        self,
        db: "AsyncDatabase[Any]",
        collection_name: str = COLLECTION_NAME,
        client: Optional[Any] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            db: Async database handle
            collection_name: Collection holding the records
            client: Owning client, closed on disconnect() when given

        Raises:
            InvalidInputError: If no database handle is given
        """
        if db is None:
            raise InvalidInputError("A MongoDB database instance must be provided.")
        self.db = db
        self.client = client
        self.collection = db[collection_name]

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.close()
        logger.info("storage_disconnected", backend=self.name)

    async def health_check(self) -> bool:
        try:
            await self.db.command("ping")
        except PyMongoError as exc:
            raise StorageAdapterError("MongoDB health check failed", exc, operation="health_check") from exc
        return True

    async def get(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        try:
            doc = await self.collection.find_one({"_id": document_id(tenant_id, context_id)})
            if not doc:
                return None
            record = ContextRecord.from_wire(doc["context"])
        except (PyMongoError, ValidationError, KeyError) as exc:
            logger.error(
                "storage_operation_failed", backend=self.name, operation="get", context_id=context_id
            )
            raise StorageAdapterError(
                f"Failed to get context '{context_id}' from MongoDB",
                exc,
                operation="get",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc

        if (record.tenant_id, record.context_id) != (tenant_id, context_id):
            logger.error(
                "storage_identity_mismatch",
                backend=self.name,
                stored_tenant_id=record.tenant_id,
                stored_context_id=record.context_id,
            )
            raise StorageAdapterError(
                f"Document for context '{context_id}' holds a different record",
                ValueError(f"stored key ({record.tenant_id!r}, {record.context_id!r})"),
                operation="get",
                tenant_id=tenant_id,
                context_id=context_id,
            )
        return record

    async def set(self, record: ContextRecord[Any]) -> ContextRecord[Any]:
        _id = document_id(record.tenant_id, record.context_id)
        try:
            await self.collection.replace_one(
                {"_id": _id}, {"_id": _id, "context": record.to_wire()}, upsert=True
            )
        except PyMongoError as exc:
            logger.error(
                "storage_operation_failed",
                backend=self.name,
                operation="set",
                context_id=record.context_id,
            )
            raise StorageAdapterError(
                f"Failed to set context '{record.context_id}' in MongoDB",
                exc,
                operation="set",
                tenant_id=record.tenant_id,
                context_id=record.context_id,
            ) from exc
        return record

    async def delete(self, tenant_id: str, context_id: str) -> None:
        try:
            await self.collection.delete_one({"_id": document_id(tenant_id, context_id)})
        except PyMongoError as exc:
            logger.error(
                "storage_operation_failed",
                backend=self.name,
                operation="delete",
                context_id=context_id,
            )
            raise StorageAdapterError(
                f"Failed to delete context '{context_id}' from MongoDB",
                exc,
                operation="delete",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc
