"""Version store interface and factory."""

from __future__ import annotations

from typing import Optional, Protocol

from ..config.settings import DatabaseSettings
from ..utils.logging import get_structured_logger
from .types import StoredRecord, StoreLookup

logger = get_structured_logger(__name__)


class VersionStore(Protocol):
    """Durable per-host record of the latest observed version.

    ``get_latest`` raises StoreReadError when the backend cannot be queried;
    that is never reported as NO_DATA. ``put`` raises StoreWriteError when the
    record was not persisted.
    """

    async def get_latest(self, host: str) -> StoreLookup:
        ...

    async def put(self, record: StoredRecord) -> None:
        ...

    async def history(self, host: str, limit: int = 10) -> list[StoredRecord]:
        ...


async def create_version_store(settings: Optional[DatabaseSettings] = None):
    """Create and initialize the SQL-backed version store.

    The returned store is set up and must be cleaned up by the caller.
    """
    from .sqlite import DatabaseManager, SqlVersionStore

    db_manager = DatabaseManager(settings or DatabaseSettings())
    await db_manager.setup()
    logger.info("Version store ready", url=db_manager.settings.url)
    return SqlVersionStore(db_manager)
