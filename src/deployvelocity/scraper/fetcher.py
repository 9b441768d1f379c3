"""HTTP page retrieval for monitoring runs."""

import asyncio
from typing import Optional, Protocol

import aiohttp

from ..config.settings import MonitorSettings
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .types import FetchError, FetchResponse

logger = get_structured_logger(__name__)


class Fetcher(Protocol):
    """Anything that can retrieve a URL's status and body."""

    async def fetch(self, url: str) -> FetchResponse:
        """Fetch a URL, raising FetchError when no response was obtained."""
        ...


class HttpFetcher(AsyncContextManager):
    """aiohttp-backed fetcher sharing one client session across a run.

    Performs a single GET per call with no retries. Redirects are followed and
    the final response's status is reported. Bodies of non-200 responses are
    not read.
    """

    def __init__(self, settings: Optional[MonitorSettings] = None):
        self.settings = settings or MonitorSettings()
        self.session: Optional[aiohttp.ClientSession] = None

    async def setup(self) -> None:
        if self.session is not None and not self.session.closed:
            return

        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
            headers={"User-Agent": self.settings.user_agent},
        )
        logger.debug(
            "HTTP session opened", timeout=self.settings.request_timeout
        )

    async def cleanup(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None
            logger.debug("HTTP session closed")

    async def fetch(self, url: str) -> FetchResponse:
        if self.session is None or self.session.closed:
            await self.setup()

        try:
            async with self.session.get(url, allow_redirects=True) as response:
                body = await response.read() if response.status == 200 else b""
                return FetchResponse(
                    status_code=response.status, body=body, url=str(response.url)
                )
        except asyncio.TimeoutError as e:
            raise FetchError(
                f"request timed out after {self.settings.request_timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise FetchError(str(e) or type(e).__name__) from e
