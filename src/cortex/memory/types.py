"""Core types for the Cortex memory module.

Defines ContextRecord, the unit stored in every storage backend, together
with its metadata and the options accepted by ``ContextStore.set_memory``.

Records cross the storage boundary in their wire shape::

    {
        "tenantId": "t1",
        "contextId": "c1",
        "data": {...},
        "metadata": {
            "createdAt": "...", "updatedAt": "...", "version": 1,
            "ttl": 60, "tags": ["a"], "sizeBytes": 13
        }
    }
"""

import json
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")

# Metadata keys owned by the store; caller-supplied values are discarded
COMPUTED_METADATA_KEYS = frozenset(
    {
        "created_at",
        "createdAt",
        "updated_at",
        "updatedAt",
        "version",
        "size_bytes",
        "sizeBytes",
    }
)

_OPTIONAL_WIRE_KEYS = ("ttl", "tags")


def serialized_size(data: Any) -> int:
    """Return the byte length of the compact UTF-8 JSON encoding of *data*.

    Floats are measured in Python's repr form (``1.0`` counts 3 bytes), which
    is also how the record is stored. NaN and infinities have no JSON form and
    are rejected.

    Args:
        data: Any JSON-serialisable value

    Returns:
        Number of bytes, e.g. 13 for ``{"foo": "bar"}``

    Raises:
        TypeError: If data is not JSON-serialisable
        ValueError: If data contains NaN, infinity or circular references
    """
    encoded = json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return len(encoded.encode("utf-8"))


class ContextMetadata(BaseModel):
    """Versioning and bookkeeping metadata of a context record.

    Attributes:
        created_at: When the record was first created (never changes)
        updated_at: When the record was last written
        version: Write counter, 1 on creation, +1 on every update
        ttl: Optional time-to-live in seconds
        tags: Optional caller-supplied tags, replaced on every write
        size_bytes: Serialized size of the current data

    Extra caller-supplied keys are kept verbatim.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="allow"
    )

    created_at: datetime
    updated_at: datetime
    version: int = Field(..., ge=1)
    ttl: Optional[int] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None
    size_bytes: int = Field(..., ge=0)


class ContextRecord(BaseModel, Generic[DataT]):
    """A stored context, addressed by ``(tenant_id, context_id)``.

    Attributes:
        tenant_id: Namespace owning the record
        context_id: Identifier unique within the tenant
        data: Opaque caller payload
        metadata: Versioning metadata computed by the store
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    tenant_id: str = Field(..., min_length=1)
    context_id: str = Field(..., min_length=1)
    data: DataT
    metadata: ContextMetadata

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible wire representation.

        Unset optional metadata fields (ttl, tags) are omitted.

        Returns:
            Dictionary with camelCase keys
        """
        payload = self.model_dump(mode="json", by_alias=True)
        metadata = payload["metadata"]
        for key in _OPTIONAL_WIRE_KEYS:
            if metadata.get(key) is None:
                metadata.pop(key, None)
        return payload

    def to_json(self) -> str:
        """Return the wire representation encoded as a JSON string."""
        return json.dumps(self.to_wire())

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "ContextRecord[Any]":
        """Parse a wire representation back into a record.

        Args:
            payload: Dictionary in wire shape (camelCase or snake_case keys)

        Returns:
            Validated ContextRecord

        Raises:
            pydantic.ValidationError: If the payload is malformed
        """
        return cls.model_validate(payload)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ContextRecord[Any]":
        """Parse a JSON-encoded wire representation."""
        return cls.model_validate_json(raw)


class MetadataOptions(BaseModel):
    """Caller-supplied metadata for a write.

    Attributes:
        ttl: Time-to-live in seconds; falls back to the store default
        tags: Tags for the record, replacing any previous tags

    Any extra keys are stored verbatim in the record metadata.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    ttl: Optional[int] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None

    def custom_fields(self) -> dict[str, Any]:
        """Return extra caller keys, minus the ones the store computes itself."""
        extra = self.model_extra or {}
        return {k: v for k, v in extra.items() if k not in COMPUTED_METADATA_KEYS}


class SetMemoryOptions(BaseModel, Generic[DataT]):
    """Options for ``ContextStore.set_memory``.

    Attributes:
        data: Payload to store; required and must not be None
        metadata: Optional caller-supplied metadata
    """

    data: DataT
    metadata: Optional[MetadataOptions] = None


class ContextStoreConfig(BaseModel):
    """Configuration of a ContextStore.

    Attributes:
        default_ttl_seconds: TTL applied to writes that do not specify one.
            None means no expiry.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    default_ttl_seconds: Optional[int] = Field(default=None, ge=0)
