"""Type definitions for the CLI module."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class CommandResult:
    """Result of a CLI command execution."""

    def __init__(
        self,
        success: bool,
        message: str = "",
        data: Optional[dict[str, Any]] = None,
        exit_code: int = 0,
    ):
        self.success = success
        self.message = message
        self.data = data or {}
        self.exit_code = exit_code
        self.timestamp = datetime.now(timezone.utc)

    def __bool__(self) -> bool:
        return self.success


class CLIContext:
    """Context object for CLI commands."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        verbose: bool = False,
        debug: bool = False,
    ):
        self.config_path = config_path
        self.verbose = verbose
        self.debug = debug
        self.start_time = datetime.now(timezone.utc)
