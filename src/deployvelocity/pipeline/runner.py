"""One monitoring run: fetch every target, then reconcile against the store."""

import time
from collections.abc import Sequence
from typing import Optional

from ..config.settings import AppSettings
from ..scraper.fetcher import Fetcher
from ..scraper.hashing import FingerprintExtractor
from ..scraper.orchestrator import FetchOrchestrator, ResultHook
from ..storage.interface import VersionStore
from ..utils.logging import (
    bind_run_context,
    clear_run_context,
    get_structured_logger,
)
from .reconciler import Reconciler
from .types import RunReport

logger = get_structured_logger(__name__)


class VersionMonitor:
    """Drives fetch batches and reconciliation for a fixed configuration.

    Reconciliation starts only after every URL of the batch has resolved.
    Debug runs are sequential and never write to the store.
    """

    def __init__(
        self,
        settings: AppSettings,
        fetcher: Fetcher,
        store: VersionStore,
        parse_headers: Optional[bool] = None,
        on_result: Optional[ResultHook] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.store = store

        if parse_headers is None:
            parse_headers = settings.monitor.parse_headers

        self.extractor = FingerprintExtractor(
            parse_headers=parse_headers, hash_type=settings.monitor.hash_type
        )
        self.orchestrator = FetchOrchestrator(
            fetcher, self.extractor, on_result=on_result
        )
        self.reconciler = Reconciler()
        self.runs_completed = 0

    async def run(self, urls: Sequence[str]) -> RunReport:
        """Execute one run over ``urls`` and report what happened."""
        run_id = bind_run_context()
        report = RunReport(run_id=run_id, started_at=time.time())

        try:
            logger.info(
                "Run started",
                url_count=len(urls),
                concurrency=self.settings.effective_concurrency,
                debug=self.settings.debug,
            )

            report.results = await self.orchestrator.run(
                urls, self.settings.effective_concurrency
            )

            if self.settings.debug:
                logger.info("Skipping store update in debug mode")
                report.persisted = False
            else:
                report.outcomes = await self.reconciler.reconcile(
                    report.results, self.store
                )

            report.finished_at = time.time()
            self.runs_completed += 1
            logger.info("Run complete", **report.summary())
            return report
        finally:
            clear_run_context()
