"""SQLAlchemy ORM models for version records."""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..types import StoredRecord


class Base(DeclarativeBase):
    pass


class VersionRecord(Base):
    """One detected version change for a host.

    Rows are only ever inserted; the most recent row per host (by ``updated``,
    then ``id``) is the host's current version.
    """

    __tablename__ = "version_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    host: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")

    version_hash: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    header_hash: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    includes_hash: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    includes_list: Mapped[str] = mapped_column(Text, nullable=False, default="")

    update_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated: Mapped[int] = mapped_column(Integer, nullable=False)  # epoch seconds

    __table_args__ = (Index("ix_version_records_host_updated", "host", "updated"),)

    def __repr__(self) -> str:
        return (
            f"<VersionRecord(host={self.host}, update_count={self.update_count}, "
            f"version_hash={self.version_hash})>"
        )

    @classmethod
    def from_record(cls, record: StoredRecord) -> VersionRecord:
        return cls(
            host=record.host,
            url=record.url,
            version_hash=record.version_fingerprint,
            header_hash=record.header_fingerprint,
            includes_hash=record.includes_fingerprint,
            includes_list=record.includes_list,
            update_count=record.update_count,
            updated=record.updated_at,
        )

    def to_record(self) -> StoredRecord:
        return StoredRecord(
            host=self.host,
            url=self.url,
            version_fingerprint=self.version_hash,
            header_fingerprint=self.header_hash,
            includes_fingerprint=self.includes_hash,
            includes_list=self.includes_list,
            update_count=self.update_count or 0,
            updated_at=self.updated,
        )
