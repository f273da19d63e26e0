"""Versioned context store.

ContextStore validates identifiers, runs the read-modify-write sequence that
computes version, timestamps and size on every write, and normalises backend
failures into the error taxonomy of ``cortex.memory.errors``.

Usage:
    store = ContextStore(InMemoryStorageAdapter(), ContextStoreConfig(default_ttl_seconds=60))
    record = await store.set_memory("t1", "c1", {"data": {"foo": "bar"}})
    record = await store.get_memory("t1", "c1")
    await store.delete_memory("t1", "c1")

Concurrency: ``set_memory`` reads and writes through two independent adapter
calls with no locking or compare-and-swap. Two overlapping writes to the same
key can read the same prior version and the later write silently replaces the
earlier one (lost update). Callers that need serialised writes per key must
serialise them themselves.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.errors import CortexError, InvalidInputError, StorageAdapterError
from cortex.memory.types import (
    ContextMetadata,
    ContextRecord,
    ContextStoreConfig,
    MetadataOptions,
    SetMemoryOptions,
    serialized_size,
)

SetMemoryInput = Union[SetMemoryOptions[Any], Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_identifiers(tenant_id: Any, context_id: Any) -> None:
    for name, value in (("tenant_id", tenant_id), ("context_id", context_id)):
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError(f"{name} must be a non-empty string")


def _parse_options(options: Any) -> SetMemoryOptions[Any]:
    if isinstance(options, SetMemoryOptions):
        parsed = options
    elif isinstance(options, Mapping):
        if "data" not in options:
            raise InvalidInputError("options.data is required")
        try:
            parsed = SetMemoryOptions.model_validate(dict(options))
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid set_memory options: {exc}") from exc
    else:
        raise InvalidInputError("options must be a SetMemoryOptions instance or a mapping")

    if parsed.data is None:
        raise InvalidInputError("options.data is required")
    return parsed


class ContextStore:
    """Multi-tenant, versioned key-value store over a StorageAdapter.

    The store holds no mutable state besides its configuration; thread and
    task safety are those of the adapter.
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        config: Optional[Union[ContextStoreConfig, Mapping[str, Any]]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            adapter: Storage backend implementing StorageAdapter
            config: Store configuration (default TTL)
            clock: Returns the current UTC time; one reading per write

        Raises:
            InvalidInputError: If adapter is missing or not a StorageAdapter
        """
        if not isinstance(adapter, StorageAdapter):
            raise InvalidInputError("A storage adapter must be provided.")

        if config is None:
            config = ContextStoreConfig()
        elif not isinstance(config, ContextStoreConfig):
            try:
                config = ContextStoreConfig.model_validate(dict(config))
            except ValidationError as exc:
                raise InvalidInputError(f"Invalid store configuration: {exc}") from exc

        self._adapter = adapter
        self._config = config
        self._clock = clock

    @property
    def adapter(self) -> StorageAdapter:
        return self._adapter

    @property
    def config(self) -> ContextStoreConfig:
        return self._config

    async def get_memory(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        """Read the record stored under ``(tenant_id, context_id)``.

        Args:
            tenant_id: Tenant namespace
            context_id: Context identifier within the tenant

        Returns:
            The stored record, or None if it does not exist

        Raises:
            InvalidInputError: If either identifier is empty
            StorageAdapterError: If the backend call fails
        """
        _validate_identifiers(tenant_id, context_id)
        return await self._read(tenant_id, context_id)

    async def set_memory(
        self, tenant_id: str, context_id: str, options: SetMemoryInput
    ) -> ContextRecord[Any]:
        """Create or update the record stored under ``(tenant_id, context_id)``.

        The version is the existing version plus one (1 on creation),
        ``created_at`` is preserved across updates, ``updated_at`` and
        ``size_bytes`` are recomputed, ``ttl`` falls back to the configured
        default and caller metadata replaces the previous metadata verbatim.

        Args:
            tenant_id: Tenant namespace
            context_id: Context identifier within the tenant
            options: SetMemoryOptions, or a mapping with ``data`` and an
                optional ``metadata`` mapping

        Returns:
            The record as returned by the adapter

        Raises:
            InvalidInputError: If identifiers, data or metadata are invalid
            StorageAdapterError: If reading or writing the backend fails
        """
        _validate_identifiers(tenant_id, context_id)
        parsed = _parse_options(options)
        try:
            size_bytes = serialized_size(parsed.data)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Data for context '{context_id}' must be JSON-serialisable") from exc

        existing = await self._read(tenant_id, context_id)

        now = self._clock()
        caller_metadata = parsed.metadata or MetadataOptions()
        ttl = caller_metadata.ttl
        if ttl is None:
            ttl = self._config.default_ttl_seconds

        record: ContextRecord[Any] = ContextRecord(
            tenant_id=tenant_id,
            context_id=context_id,
            data=parsed.data,
            metadata=ContextMetadata(
                **caller_metadata.custom_fields(),
                created_at=existing.metadata.created_at if existing else now,
                updated_at=now,
                version=existing.metadata.version + 1 if existing else 1,
                ttl=ttl,
                tags=caller_metadata.tags,
                size_bytes=size_bytes,
            ),
        )

        try:
            return await self._adapter.set(record)
        except CortexError:
            raise
        except Exception as exc:
            raise StorageAdapterError(
                f"Failed to set memory for {context_id}",
                exc,
                operation="set",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc

    async def delete_memory(self, tenant_id: str, context_id: str) -> None:
        """Delete the record stored under ``(tenant_id, context_id)``.

        Succeeds when no record exists.

        Raises:
            InvalidInputError: If either identifier is empty
            StorageAdapterError: If the backend call fails
        """
        _validate_identifiers(tenant_id, context_id)
        try:
            await self._adapter.delete(tenant_id, context_id)
        except CortexError:
            raise
        except Exception as exc:
            raise StorageAdapterError(
                f"Failed to delete memory for {context_id}",
                exc,
                operation="delete",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc

    async def _read(self, tenant_id: str, context_id: str) -> Optional[ContextRecord[Any]]:
        try:
            return await self._adapter.get(tenant_id, context_id)
        except CortexError:
            raise
        except Exception as exc:
            raise StorageAdapterError(
                f"Failed to get memory for {context_id}",
                exc,
                operation="get",
                tenant_id=tenant_id,
                context_id=context_id,
            ) from exc
