"""Command-line interface for deploy-velocity."""

from .main import cli
from .types import CLIContext, CommandResult

__all__ = ["cli", "CLIContext", "CommandResult"]
