"""Structured logging setup using structlog."""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import FilteringBoundLogger


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging with appropriate processors."""

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _safe_add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _safe_add_logger_name(logger, method_name: str, event_dict):
    """Add the logger name, tolerating WriteLogger which has none."""
    if hasattr(logger, "name"):
        event_dict["logger"] = logger.name
    else:
        event_dict.setdefault("logger", "deployvelocity")
    return event_dict


def get_logger(name: str, **initial_values: Any) -> FilteringBoundLogger:
    """Get a lazily configured structlog logger."""
    return structlog.get_logger(name, **initial_values)


def bind_run_context(run_id: str = "") -> str:
    """Bind a run identifier to every log line emitted during a run."""
    run_id = run_id or uuid.uuid4().hex[:8]
    structlog.contextvars.bind_contextvars(run_id=run_id)
    return run_id


def clear_run_context() -> None:
    """Clear run-scoped logging context."""
    structlog.contextvars.clear_contextvars()


class StructuredLogger:
    """Wrapper for structured logging with convenience methods."""

    def __init__(self, name: str):
        # Stays a lazy proxy so setup_logging applies to module-level loggers.
        self.logger = get_logger(name, logger=name)
        self.name = name

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self.logger.critical(message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, **kwargs)


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
