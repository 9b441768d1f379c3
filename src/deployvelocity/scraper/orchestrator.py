"""Bounded-concurrency fetch and fingerprint orchestration."""

import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional

from ..config.loader import derive_host
from ..utils.async_utils import gather_with_limit
from ..utils.logging import get_structured_logger
from .fetcher import Fetcher
from .hashing import FingerprintExtractor
from .types import FetchError, FetchResult

logger = get_structured_logger(__name__)

ResultHook = Callable[[FetchResult], Awaitable[None]]


class FetchOrchestrator:
    """Runs fetch + extract over a batch of URLs with bounded concurrency.

    Every URL yields exactly one FetchResult, returned in input order once all
    of them have resolved. Failures of individual URLs are captured in their
    results and never raised out of ``run``.

    ``on_result`` is awaited for each result while the URL still holds its
    concurrency permit, so with a limit of 1 it gates the next URL.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: FingerprintExtractor,
        on_result: Optional[ResultHook] = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.on_result = on_result

        self.urls_processed = 0
        self.urls_succeeded = 0
        self.urls_failed = 0

    async def run(
        self, urls: Sequence[str], concurrency_limit: int
    ) -> list[FetchResult]:
        """Fetch and fingerprint every URL, at most ``concurrency_limit`` at once."""
        if concurrency_limit < 1:
            raise ValueError(
                f"Concurrency limit must be at least 1, got {concurrency_limit}"
            )

        # Malformed URLs are configuration errors: fail before any request.
        hosts = [derive_host(url) for url in urls]

        logger.info(
            "Starting fetch batch", url_count=len(urls), concurrency=concurrency_limit
        )
        start_time = time.time()

        results = await gather_with_limit(
            *(self._process_url(url, host) for url, host in zip(urls, hosts)),
            limit=concurrency_limit,
        )

        logger.info(
            "Fetch batch complete",
            url_count=len(results),
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
            duration=round(time.time() - start_time, 3),
        )
        return results

    async def _process_url(self, url: str, host: str) -> FetchResult:
        """Fetch and fingerprint one URL; never raises for fetch failures."""
        logger.debug("Processing url", url=url, host=host)

        try:
            response = await self.fetcher.fetch(url)

            if response.status_code != 200:
                result = FetchResult.failed(
                    host,
                    url,
                    f"msg: unexpected response status, status code: {response.status_code}",
                    status_code=response.status_code,
                )
            else:
                extraction = self.extractor.extract(response.text)
                result = FetchResult.from_extraction(
                    host, url, extraction, observed_at=int(time.time())
                )
        except FetchError as e:
            result = FetchResult.failed(
                host,
                url,
                f"msg: {str(e)}, status code: {e.status_code}",
                status_code=e.status_code,
            )
        except Exception as e:
            logger.exception("Unexpected error processing url", url=url)
            result = FetchResult.failed(host, url, f"msg: {str(e)}, status code: 0")

        self.urls_processed += 1
        if result.success:
            self.urls_succeeded += 1
            logger.debug(
                "Url fingerprinted",
                host=host,
                includes_hash=result.includes_fingerprint,
                header_hash=result.header_fingerprint,
                version_hash=result.version_fingerprint,
            )
        else:
            self.urls_failed += 1
            logger.warning(
                "Url fetch failed", host=host, url=url, error=result.error_message
            )

        if self.on_result is not None:
            try:
                await self.on_result(result)
            except Exception:
                logger.exception("Result hook failed", host=host, url=url)

        return result

    def get_stats(self) -> dict[str, Any]:
        """Get cumulative statistics across runs."""
        return {
            "urls_processed": self.urls_processed,
            "urls_succeeded": self.urls_succeeded,
            "urls_failed": self.urls_failed,
            "success_rate": self.urls_succeeded / max(self.urls_processed, 1),
        }
