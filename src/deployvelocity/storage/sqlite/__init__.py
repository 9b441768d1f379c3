"""SQLite storage backend."""

from .database import DatabaseManager, to_async_url
from .models import Base, VersionRecord
from .store import SqlVersionStore

__all__ = [
    "Base",
    "DatabaseManager",
    "SqlVersionStore",
    "VersionRecord",
    "to_async_url",
]
