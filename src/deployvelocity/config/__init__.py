"""Configuration management system for deploy-velocity."""

from .loader import (
    DEFAULT_CONFIG_PATH,
    ConfigLoader,
    create_example_config,
    derive_host,
    validate_urls,
)
from .settings import (
    AppSettings,
    DatabaseSettings,
    MonitorSettings,
    get_settings,
    update_settings,
)
from .types import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    InvalidURLError,
    MonitorConfiguration,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "MonitorSettings",
    "get_settings",
    "update_settings",
    "ConfigLoader",
    "DEFAULT_CONFIG_PATH",
    "create_example_config",
    "derive_host",
    "validate_urls",
    "MonitorConfiguration",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "InvalidURLError",
]
