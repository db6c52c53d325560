"""
Configuration management for Deck Watchman.

Uses pydantic-settings to load configuration from environment variables
and .env files. Command-line values are passed in as init kwargs and
take priority over both.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Directories
    input_dir: Optional[Path] = None
    output_dir: Optional[Path] = None

    # Gotenberg Configuration
    gotenberg_url: str = "http://localhost:3000"
    convert_timeout: float = Field(120.0, gt=0)  # seconds
    health_timeout: float = Field(5.0, gt=0)  # seconds

    # Retention Configuration
    cleanup_days: int = Field(7, ge=0)  # 0 expires files on the next sweep
    sweep_interval_hours: float = Field(24.0, gt=0)

    # Watch Configuration
    settle_delay: float = Field(1.0, ge=0)  # seconds
    write_stability: float = Field(2.0, ge=0)  # seconds

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("gotenberg_url")
    @classmethod
    def check_gotenberg_url(cls, value: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not an http(s) URL: {value!r}")
        return value.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def sweep_interval_seconds(self) -> float:
        return self.sweep_interval_hours * 3600

    def is_complete(self) -> bool:
        """Both directories are known."""
        return self.input_dir is not None and self.output_dir is not None
