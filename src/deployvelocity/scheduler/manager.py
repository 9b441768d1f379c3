"""APScheduler-based periodic execution of monitoring runs."""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Optional

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MISSED,
)
from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .types import SchedulerError, SchedulerStats

logger = get_structured_logger(__name__)

RunJob = Callable[[], Awaitable[Any]]

DEFAULT_JOB_ID = "monitor-run"


class SchedulerManager(AsyncContextManager):
    """Runs a single coroutine job on a fixed interval.

    Runs never overlap: a run still in progress when the next one is due
    causes that one to be skipped, and missed runs are coalesced.
    """

    def __init__(
        self,
        job: RunJob,
        interval_seconds: int,
        job_id: str = DEFAULT_JOB_ID,
        run_immediately: bool = True,
    ):
        if interval_seconds <= 0:
            raise SchedulerError("Interval must be positive")

        self.job = job
        self.interval_seconds = interval_seconds
        self.job_id = job_id
        self.run_immediately = run_immediately

        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.stats = SchedulerStats(interval_seconds=interval_seconds)

    async def setup(self) -> None:
        """Create the scheduler, register the run job and start it."""
        if self.is_running:
            return

        logger.info("Starting scheduler", interval_seconds=self.interval_seconds)

        try:
            self.scheduler = AsyncIOScheduler(
                executors={"default": AsyncIOExecutor()},
                job_defaults={
                    "coalesce": True,
                    "max_instances": 1,
                    "misfire_grace_time": 30,
                },
                timezone="UTC",
            )

            self._register_event_listeners()

            next_run_time = (
                datetime.now(timezone.utc) if self.run_immediately else None
            )
            job_kwargs = {"next_run_time": next_run_time} if next_run_time else {}

            self.scheduler.add_job(
                self.job,
                trigger=IntervalTrigger(seconds=self.interval_seconds),
                id=self.job_id,
                name=self.job_id,
                replace_existing=True,
                **job_kwargs,
            )

            self.scheduler.start()
            self.is_running = True
            self.stats.is_running = True
            logger.info("Scheduler started", job_id=self.job_id)

        except Exception as e:
            logger.error("Failed to start scheduler", error=str(e))
            raise SchedulerError(f"Scheduler startup failed: {str(e)}") from e

    async def cleanup(self) -> None:
        """Stop the scheduler without waiting for a run in progress."""
        if not self.is_running:
            return

        logger.info("Stopping scheduler")
        if self.scheduler:
            self.scheduler.shutdown(wait=False)

        self.is_running = False
        self.stats.is_running = False
        logger.info("Scheduler stopped")

    def _register_event_listeners(self) -> None:
        self.scheduler.add_listener(self._on_job_executed, EVENT_JOB_EXECUTED)
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self.scheduler.add_listener(self._on_job_missed, EVENT_JOB_MISSED)

    def _on_job_executed(self, event) -> None:
        self.stats.runs_executed += 1
        self.stats.last_run_at = datetime.now(timezone.utc)
        logger.info("Scheduled run finished", job_id=event.job_id)

    def _on_job_error(self, event) -> None:
        self.stats.runs_executed += 1
        self.stats.runs_failed += 1
        self.stats.last_run_at = datetime.now(timezone.utc)
        self.stats.last_error = str(event.exception)
        logger.error(
            "Scheduled run failed", job_id=event.job_id, error=str(event.exception)
        )

    def _on_job_missed(self, event) -> None:
        self.stats.runs_missed += 1
        logger.warning("Scheduled run missed", job_id=event.job_id)

    def get_stats(self) -> SchedulerStats:
        if self.scheduler and self.is_running:
            job = self.scheduler.get_job(self.job_id)
            self.stats.next_run_at = job.next_run_time if job else None
        return self.stats
