"""Shared utilities for deploy-velocity."""

from .async_utils import AsyncContextManager, gather_with_limit
from .logging import (
    bind_run_context,
    clear_run_context,
    get_logger,
    get_structured_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_structured_logger",
    "bind_run_context",
    "clear_run_context",
    "gather_with_limit",
    "AsyncContextManager",
]
