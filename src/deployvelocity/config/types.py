"""Type definitions for configuration system."""

from dataclasses import dataclass, field
from typing import Any, Optional


class ConfigError(Exception):
    """Base exception for configuration-related errors."""

    pass


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    pass


class ConfigLoadError(ConfigError):
    """Exception raised when configuration loading fails."""

    pass


class InvalidURLError(ConfigValidationError):
    """Exception raised when a target URL has no usable host."""

    pass


@dataclass
class MonitorConfiguration:
    """Targets and parsing options read from the YAML config file."""

    urls: list[str] = field(default_factory=list)
    parse_headers: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonitorConfiguration":
        """Create from dictionary configuration."""
        urls = data.get("urls") or []
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise ConfigValidationError("'urls' must be a list of strings")

        parse_headers = data.get("parse_headers")
        if parse_headers is not None and not isinstance(parse_headers, bool):
            raise ConfigValidationError("'parse_headers' must be a boolean")

        return cls(urls=[u.strip() for u in urls], parse_headers=parse_headers)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"urls": list(self.urls)}
        if self.parse_headers is not None:
            data["parse_headers"] = self.parse_headers
        return data
