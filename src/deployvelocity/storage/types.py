"""Type definitions for storage components."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StorageError(Exception):
    """Base exception for storage-related errors."""

    pass


class StoreReadError(StorageError):
    """The store could not be queried for a host's latest record."""

    pass


class StoreWriteError(StorageError):
    """The store could not persist a record."""

    pass


class LookupStatus(str, Enum):
    """Outcome of asking the store for a host's latest version."""

    FOUND = "found"
    NO_DATA = "no_data"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class StoreLookup:
    """Latest stored version for a host, or the reason there is none."""

    status: LookupStatus
    version_fingerprint: Optional[str] = None
    update_count: int = 0

    @classmethod
    def found(cls, version_fingerprint: str, update_count: int) -> "StoreLookup":
        return cls(LookupStatus.FOUND, version_fingerprint, update_count)

    @classmethod
    def no_data(cls) -> "StoreLookup":
        return cls(LookupStatus.NO_DATA)

    @classmethod
    def malformed(cls) -> "StoreLookup":
        return cls(LookupStatus.MALFORMED)

    @property
    def has_version(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass
class StoredRecord:
    """Latest known version of a host, as persisted on change."""

    host: str
    url: str
    version_fingerprint: str
    header_fingerprint: str
    includes_fingerprint: str
    includes_list: str
    update_count: int
    updated_at: int
