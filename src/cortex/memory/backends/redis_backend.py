"""Redis storage backend.

Each tenant maps to one Redis hash (``cortex:tenant:<tenant_id>``) whose
fields are context ids and whose values are JSON-encoded records. A record
ttl is applied to the whole tenant hash with EXPIRE.
"""

from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.errors import InvalidInputError, StorageAdapterError
from cortex.memory.types import ContextRecord
from cortex.observability.logging import get_logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

DEFAULT_KEY_PREFIX = "cortex:tenant:"


class RedisStorageAdapter(StorageAdapter):
    """Adapter backed by an async redis-py client.

    Example:
        >>> from redis.asyncio import Redis
        >>> adapter = RedisStorageAdapter(Redis.from_url("redis://localhost:6379/0"))
        >>> await adapter.connect()
    """

    name = "redis"

    def __init__(self, redis: "Redis", key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        """Initialize the adapter.

        Args:
            redis: A redis.asyncio.Redis client (or compatible)
            key_prefix: Prefix of the per-tenant hash keys

        Raises:
            InvalidInputError: If no client is given
        """
        if redis is None:
            raise InvalidInputError("A redis.asyncio.Redis client instance must be provided.")
        self.redis = redis
        self.key_prefix = key_prefix

    def _tenant_key(self, tenant_id: str) -> str:
        return f"{self.key_prefix}{tenant_id}"

    def _failure(
        self, message: str, exc: Exception, operation: str, tenant_id: str, context_id: Optional[str]
    ) -> StorageAdapterError:
        logger.error(
            "storage_operation_failed",
            backend=self.name,
            operation=operation,
            tenant_id=tenant_id,
            context_id=context_id,
            error=str(exc),
        )
        return StorageAdapterError(
            message, exc, operation=operation, tenant_id=tenant_id, context_id=context_id
        )

    async def connect(self) -> None:
        try:
            await self.redis.ping()
        except RedisError as exc:
            logger.error("storage_connect_failed", backend=self.name, error=str(exc))
            raise StorageAdapterError("Failed to connect to Redis", exc, operation="connect") from exc
        logger.info("storage_connected", backend=self.name)

    async def disconnect(self) -> None:
        await self.redis.aclose()
        logger.info("storage_disconnected", backend=self.name)

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as exc:
            raise StorageAdapterError("Redis health check failed", exc, operation="health_check") from exc

    async def get(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        try:
            raw = await self.redis.hget(self._tenant_key(tenant_id), context_id)
            return ContextRecord.from_json(raw) if raw else None
        except (RedisError, ValidationError) as exc:
            raise self._failure(
                f"Failed to get context '{context_id}' from Redis", exc, "get", tenant_id, context_id
            ) from exc

    async def set(self, record: ContextRecord[Any]) -> ContextRecord[Any]:
        tenant_key = self._tenant_key(record.tenant_id)
        try:
            await self.redis.hset(tenant_key, record.context_id, record.to_json())
            # Expiry is per hash, so the latest write's ttl governs the whole tenant
            if record.metadata.ttl:
                await self.redis.expire(tenant_key, record.metadata.ttl)
        except RedisError as exc:
            raise self._failure(
                f"Failed to set context '{record.context_id}' in Redis",
                exc,
                "set",
                record.tenant_id,
                record.context_id,
            ) from exc
        return record

    async def delete(self, tenant_id: str, context_id: str) -> None:
        try:
            await self.redis.hdel(self._tenant_key(tenant_id), context_id)
        except RedisError as exc:
            raise self._failure(
                f"Failed to delete context '{context_id}' from Redis",
                exc,
                "delete",
                tenant_id,
                context_id,
            ) from exc
