"""Configuration loading and persistence utilities."""

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import yaml

from .types import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    InvalidURLError,
    MonitorConfiguration,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"


def derive_host(url: str) -> str:
    """Return the authority component of a URL (host and optional port)."""
    try:
        parts = urlsplit(url)
        # Touching .port validates it; urlsplit alone accepts "host:abc".
        parts.port
    except ValueError as e:
        raise InvalidURLError(f"Malformed URL {url!r}: {str(e)}") from e

    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidURLError(f"URL must be absolute http(s) with a host: {url!r}")

    return parts.netloc.rpartition("@")[2]


def validate_urls(urls: list[str]) -> list[str]:
    """Validate every target URL, failing on the first malformed one."""
    for url in urls:
        derive_host(url)
    return urls


class ConfigLoader:
    """Handles loading and saving the monitor configuration file."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_PATH
        self._cache: Optional[dict[str, Any]] = None

    def load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if self._cache is not None:
            return self._cache

        if not self.config_file.exists():
            raise ConfigLoadError(f"Config file {self.config_file} not found")

        try:
            with open(self.config_file, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {str(e)}") from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to load config file: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigLoadError(
                f"Config file {self.config_file} must contain a mapping"
            )

        logger.info(f"Loaded configuration from {self.config_file}")
        self._cache = config
        return config

    def save_yaml_config(self, config: dict[str, Any]) -> None:
        """Save configuration to YAML file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(config, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config file: {str(e)}") from e

        logger.info(f"Saved configuration to {self.config_file}")
        self._cache = config

    def get_monitor_config(self) -> MonitorConfiguration:
        """Get the validated monitor configuration."""
        config = MonitorConfiguration.from_dict(self.load_yaml_config())
        validate_urls(config.urls)
        return config

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of issues."""
        try:
            config = self.load_yaml_config()
        except ConfigError as e:
            return [str(e)]

        issues = []
        try:
            monitor_config = MonitorConfiguration.from_dict(config)
        except ConfigValidationError as e:
            return [str(e)]

        if not monitor_config.urls:
            issues.append("No urls configured")

        for i, url in enumerate(monitor_config.urls):
            try:
                derive_host(url)
            except InvalidURLError as e:
                issues.append(f"URL {i}: {str(e)}")

        return issues


def create_example_config(config_path: Path) -> None:
    """Create an example configuration file."""
    example = MonitorConfiguration(
        urls=["https://example.com", "https://www.example.org/app"],
        parse_headers=True,
    )
    ConfigLoader(config_path).save_yaml_config(example.to_dict())
