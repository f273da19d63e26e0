"""Cortex memory module.

Provides ContextStore, the versioned multi-tenant store, its record types,
error taxonomy and the StorageAdapter contract implemented by backends.
"""

from cortex.memory.backends.base import StorageAdapter
from cortex.memory.backends.in_memory import InMemoryStorageAdapter
from cortex.memory.errors import CortexError, InvalidInputError, StorageAdapterError
from cortex.memory.store import ContextStore
from cortex.memory.types import (
    ContextMetadata,
    ContextRecord,
    ContextStoreConfig,
    MetadataOptions,
    SetMemoryOptions,
)

__all__ = [
    "ContextStore",
    "ContextStoreConfig",
    "ContextRecord",
    "ContextMetadata",
    "MetadataOptions",
    "SetMemoryOptions",
    "StorageAdapter",
    "InMemoryStorageAdapter",
    "CortexError",
    "InvalidInputError",
    "StorageAdapterError",
]
