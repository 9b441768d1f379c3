"""Storage layer for per-host version records."""

from .interface import VersionStore, create_version_store
from .memory import MemoryVersionStore
from .types import (
    LookupStatus,
    StorageError,
    StoredRecord,
    StoreLookup,
    StoreReadError,
    StoreWriteError,
)

__all__ = [
    "VersionStore",
    "create_version_store",
    "MemoryVersionStore",
    "LookupStatus",
    "StorageError",
    "StoredRecord",
    "StoreLookup",
    "StoreReadError",
    "StoreWriteError",
]
