"""Relational storage backend built on SQLAlchemy's async ORM.

Records live in the ``cortex_contexts`` table keyed by
``(tenant_id, context_id)``; the full wire record is kept in a JSON column.
Works with any async dialect SQLAlchemy supports (aiosqlite, asyncpg).
"""

from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.errors import InvalidInputError, StorageAdapterError
from cortex.memory.types import ContextRecord
from cortex.observability.logging import get_logger
from cortex.storage.database import Database
from cortex.storage.models import ContextModel

logger = get_logger(__name__)


class SqlStorageAdapter(StorageAdapter):
    """Adapter persisting records through a Database.

    Example:
        >>> adapter = SqlStorageAdapter(Database(DatabaseConfig(url="sqlite+aiosqlite:///./cortex.db")))
        >>> await adapter.init()
    """

    name = "sql"

    def __init__(self, database: Database) -> None:
        """Initialize the adapter.

        Args:
            database: Database providing the engine and sessions

        Raises:
            InvalidInputError: If no database is given
        """
        if database is None:
            raise InvalidInputError("A Database instance must be provided.")
        self.database = database

    async def init(self) -> None:
        """Create the contexts table if it does not exist.

        Run once when the application starts.
        """
        await self.database.create_tables()
        logger.info("storage_initialized", backend=self.name)

    async def disconnect(self) -> None:
        await self.database.close()
        logger.info("storage_disconnected", backend=self.name)

    async def health_check(self) -> bool:
        try:
            return await self.database.health_check()
        except SQLAlchemyError as exc:
            raise StorageAdapterError("Database health check failed", exc, operation="health_check") from exc

    async def get(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        try:
            async with self.database.session() as session:
                model = await session.get(ContextModel, (tenant_id, context_id))
                return ContextRecord.from_wire(model.data) if model is not None else None
        except (SQLAlchemyError, ValidationError) as exc:
            logger.error(
                "storage_operation_failed", backend=self.name, operation="get", context_id=context_id
            )
            raise StorageAdapterError(
                f"Failed to get context '{context_id}' from database",
                exc,
                operation="get",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc

    async def set(self, record: ContextRecord[Any]) -> ContextRecord[Any]:
        try:
            async with self.database.session() as session:
                await session.merge(
                    ContextModel(
                        tenant_id=record.tenant_id,
                        context_id=record.context_id,
                        data=record.to_wire(),
                    )
                )
        except SQLAlchemyError as exc:
            logger.error(
                "storage_operation_failed",
                backend=self.name,
                operation="set",
                context_id=record.context_id,
            )
            raise StorageAdapterError(
                f"Failed to set context '{record.context_id}' in database",
                exc,
                operation="set",
                tenant_id=record.tenant_id,
                context_id=record.context_id,
            ) from exc
        return record

    async def delete(self, tenant_id: str, context_id: str) -> None:
        stmt = delete(ContextModel).where(
            ContextModel.tenant_id == tenant_id, ContextModel.context_id == context_id
        )
        try:
            async with self.database.session() as session:
                await session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error(
                "storage_operation_failed",
                backend=self.name,
                operation="delete",
                context_id=context_id,
            )
            raise StorageAdapterError(
                f"Failed to delete context '{context_id}' from database",
                exc,
                operation="delete",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc
