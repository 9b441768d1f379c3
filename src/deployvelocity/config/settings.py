"""Pydantic settings models for configuration management."""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import ConfigError

SUPPORTED_HASH_TYPES = ("md5", "sha256", "blake3")


class DatabaseSettings(BaseModel):
    """Version store database configuration."""

    url: str = "sqlite:///./data/deploy_velocity.db"
    echo: bool = False

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if not v:
            raise ValueError("Database URL cannot be empty")
        return v


class MonitorSettings(BaseModel):
    """Fetching and fingerprinting configuration."""

    concurrency: int = 20
    parse_headers: bool = False
    hash_type: str = "md5"
    request_timeout: float = 30.0  # seconds
    user_agent: str = "Mozilla/5.0 (compatible; DeployVelocity/1.0)"
    interval_seconds: int = 300

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v):
        if v < 1:
            raise ValueError("Concurrency must be at least 1")
        return v

    @field_validator("hash_type")
    @classmethod
    def validate_hash_type(cls, v):
        if v.lower() not in SUPPORTED_HASH_TYPES:
            raise ValueError(f"Hash type must be one of: {list(SUPPORTED_HASH_TYPES)}")
        return v.lower()

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("interval_seconds")
    @classmethod
    def validate_interval(cls, v):
        if v <= 0:
            raise ValueError("Interval must be positive")
        return v


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False
    verbose: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @property
    def effective_log_level(self) -> str:
        """Verbose and debug runs always log at DEBUG."""
        return "DEBUG" if self.verbose or self.debug else self.log_level

    @property
    def effective_concurrency(self) -> int:
        """Debug runs are strictly sequential."""
        return 1 if self.debug else self.monitor.concurrency


@lru_cache
def get_settings() -> AppSettings:
    """Get the application settings instance."""
    try:
        return AppSettings()
    except Exception as e:
        raise ConfigError(f"Failed to load settings: {str(e)}") from e


def update_settings(
    settings: AppSettings, monitor: Optional[dict] = None, **kwargs
) -> AppSettings:
    """Return a validated copy of the settings with values replaced."""
    current = settings.model_dump()
    current.update(kwargs)
    if monitor:
        current["monitor"].update(monitor)

    try:
        return AppSettings(**current)
    except Exception as e:
        raise ConfigError(f"Failed to update settings: {str(e)}") from e
