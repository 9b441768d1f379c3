"""Periodic scheduling of monitoring runs."""

from .manager import SchedulerManager
from .types import SchedulerError, SchedulerStats

__all__ = ["SchedulerManager", "SchedulerError", "SchedulerStats"]
