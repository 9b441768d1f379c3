"""Test doubles shared across the deploy-velocity test suite."""

import asyncio
from typing import Optional, Union

from deployvelocity.config import AppSettings, DatabaseSettings, MonitorSettings
from deployvelocity.scraper import FetchResponse
from deployvelocity.storage import (
    MemoryVersionStore,
    StoredRecord,
    StoreLookup,
    StoreReadError,
    StoreWriteError,
)


def page(includes: tuple[str, ...] = (), head: str = "") -> str:
    """Build a minimal HTML page with the given script includes and head."""
    scripts = "".join(f'<script src="{src}"></script>' for src in includes)
    return f"<html><head>{head}</head><body>{scripts}</body></html>"


class FakeFetcher:
    """In-memory fetcher with per-url responses and in-flight tracking.

    Unknown urls get a 200 page with a single include derived from the url.
    """

    def __init__(
        self,
        responses: Optional[dict[str, Union[FetchResponse, Exception]]] = None,
        delay: float = 0.0,
    ):
        self.responses = responses or {}
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            response = self.responses.get(url)
            if response is None:
                slug = url.rstrip("/").rsplit("/", 1)[-1]
                response = FetchResponse(200, page((f"/{slug}.js",)).encode())
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1
            self.completed += 1


class RecordingStore(MemoryVersionStore):
    """Memory store that records calls and can fail for chosen hosts."""

    def __init__(self):
        super().__init__()
        self.reads: list[str] = []
        self.writes: list[StoredRecord] = []
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()

    def seed(self, host: str, version: str, update_count: int, updated_at: int = 1):
        self.records[host] = [
            StoredRecord(
                host=host,
                url=f"https://{host}/",
                version_fingerprint=version,
                header_fingerprint="no_header",
                includes_fingerprint="no_includes",
                includes_list="no_includes",
                update_count=update_count,
                updated_at=updated_at,
            )
        ]

    async def get_latest(self, host: str) -> StoreLookup:
        self.reads.append(host)
        if host in self.fail_reads:
            raise StoreReadError(f"backend unavailable for {host}")
        return await super().get_latest(host)

    async def put(self, record: StoredRecord) -> None:
        if record.host in self.fail_writes:
            raise StoreWriteError(f"write rejected for {record.host}")
        self.writes.append(record)
        await super().put(record)


def make_settings(**kwargs) -> AppSettings:
    """Settings isolated from any .env file."""
    kwargs.setdefault("monitor", MonitorSettings(concurrency=20, parse_headers=True))
    kwargs.setdefault("database", DatabaseSettings(url="sqlite:///:memory:"))
    return AppSettings(_env_file=None, **kwargs)
