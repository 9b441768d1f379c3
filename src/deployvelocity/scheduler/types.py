"""Type definitions for the scheduler module."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


class SchedulerError(Exception):
    """Base exception for scheduler-related errors."""

    pass


@dataclass
class SchedulerStats:
    """Scheduler execution statistics."""

    is_running: bool = False
    interval_seconds: int = 0
    runs_executed: int = 0
    runs_failed: int = 0
    runs_missed: int = 0
    last_run_at: Optional[datetime] = None
    last_error: Optional[str] = None
    next_run_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "runs_executed": self.runs_executed,
            "runs_failed": self.runs_failed,
            "runs_missed": self.runs_missed,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_error": self.last_error,
            "next_run_at": self.next_run_at.isoformat() if self.next_run_at else None,
        }
