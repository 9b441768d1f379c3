"""Monitoring run pipeline: fetch batch, barrier, reconcile."""

from .reconciler import Reconciler
from .runner import VersionMonitor
from .types import ReconcileAction, ReconcileOutcome, RunReport

__all__ = [
    "Reconciler",
    "VersionMonitor",
    "ReconcileAction",
    "ReconcileOutcome",
    "RunReport",
]
