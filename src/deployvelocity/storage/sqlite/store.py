"""SQL-backed version store."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ...utils.logging import get_structured_logger
from ..types import StoredRecord, StoreLookup, StoreReadError, StoreWriteError
from .database import DatabaseManager
from .models import VersionRecord

logger = get_structured_logger(__name__)


class SqlVersionStore:
    """Version store over an append-only ``version_records`` table."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def get_latest(self, host: str) -> StoreLookup:
        stmt = (
            select(VersionRecord)
            .where(VersionRecord.host == host)
            .order_by(VersionRecord.updated.desc(), VersionRecord.id.desc())
            .limit(1)
        )

        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to query latest version", host=host, error=str(e))
            raise StoreReadError(f"query for {host} failed: {str(e)}") from e

        if row is None:
            return StoreLookup.no_data()
        if not row.version_hash or row.update_count is None:
            logger.warning("Latest stored record is malformed", host=host, id=row.id)
            return StoreLookup.malformed()

        return StoreLookup.found(row.version_hash, row.update_count)

    async def put(self, record: StoredRecord) -> None:
        try:
            async with self.db_manager.get_session() as session:
                session.add(VersionRecord.from_record(record))
        except SQLAlchemyError as e:
            logger.error("Failed to store version", host=record.host, error=str(e))
            raise StoreWriteError(f"put for {record.host} failed: {str(e)}") from e

        logger.debug(
            "Stored version",
            host=record.host,
            update_count=record.update_count,
            version_fingerprint=record.version_fingerprint,
        )

    async def history(self, host: str, limit: int = 10) -> list[StoredRecord]:
        """Most recent records for a host, newest first."""
        stmt = (
            select(VersionRecord)
            .where(VersionRecord.host == host)
            .order_by(VersionRecord.updated.desc(), VersionRecord.id.desc())
            .limit(limit)
        )

        try:
            async with self.db_manager.get_session() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadError(f"history for {host} failed: {str(e)}") from e

        return [row.to_record() for row in rows]

    async def cleanup(self) -> None:
        await self.db_manager.cleanup()
