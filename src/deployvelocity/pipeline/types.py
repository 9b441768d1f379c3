"""Type definitions for the monitoring pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..scraper.types import FetchResult


class ReconcileAction(str, Enum):
    """What reconciliation did for one fetch result."""

    CREATED = "created"  # no usable previous record
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FETCH_FAILED = "fetch_failed"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class ReconcileOutcome:
    """Result of reconciling one host against the store."""

    host: str
    url: str
    action: ReconcileAction
    version_fingerprint: str = ""
    previous_fingerprint: Optional[str] = None
    update_count: Optional[int] = None
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.action in (ReconcileAction.CREATED, ReconcileAction.UPDATED)


@dataclass
class RunReport:
    """Everything one monitoring run observed and did."""

    run_id: str
    results: list[FetchResult] = field(default_factory=list)
    outcomes: list[ReconcileOutcome] = field(default_factory=list)
    started_at: float = 0.0
    finished_at: float = 0.0
    persisted: bool = True

    @property
    def duration(self) -> float:
        return max(self.finished_at - self.started_at, 0.0)

    @property
    def failed_results(self) -> list[FetchResult]:
        return [r for r in self.results if not r.success]

    @property
    def changed_hosts(self) -> list[str]:
        return [o.host for o in self.outcomes if o.changed]

    def summary(self) -> dict:
        return {
            "run_id": self.run_id,
            "urls": len(self.results),
            "succeeded": sum(1 for r in self.results if r.success),
            "failed": len(self.failed_results),
            "changed": len(self.changed_hosts),
            "persisted": self.persisted,
            "duration": round(self.duration, 3),
        }
