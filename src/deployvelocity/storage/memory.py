"""In-memory version store."""

from dataclasses import replace

from ..utils.logging import get_structured_logger
from .types import StoredRecord, StoreLookup

logger = get_structured_logger(__name__)


class MemoryVersionStore:
    """Keeps a bounded history of records per host in process memory."""

    def __init__(self, max_history: int = 50):
        self.records: dict[str, list[StoredRecord]] = {}
        self.max_history = max_history

    async def get_latest(self, host: str) -> StoreLookup:
        history = self.records.get(host)
        if not history:
            return StoreLookup.no_data()

        latest = history[-1]
        if not latest.version_fingerprint:
            return StoreLookup.malformed()

        return StoreLookup.found(latest.version_fingerprint, latest.update_count)

    async def put(self, record: StoredRecord) -> None:
        history = self.records.setdefault(record.host, [])
        history.append(replace(record))

        if len(history) > self.max_history:
            self.records[record.host] = history[-self.max_history :]

        logger.debug(
            "Stored version",
            host=record.host,
            update_count=record.update_count,
            history_size=len(self.records[record.host]),
        )

    async def history(self, host: str, limit: int = 10) -> list[StoredRecord]:
        return list(reversed(self.records.get(host, [])[-limit:]))
