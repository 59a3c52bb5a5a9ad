"""
Configuration Management for Bookkeeper

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The environment is read here and nowhere else.
The store receives its data directory as a constructor argument and the
ledger service receives the store, so business logic never performs a
hidden process-wide lookup.
"""

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_FOLDER_NAME = "Bookeeper"
DATA_FOLDER_NAME = "bookeeper_data"


def default_data_dir() -> Path:
    """
    Per-platform application data location.

    Windows: %APPDATA%/Bookeeper/bookeeper_data
    macOS:   ~/Library/Application Support/Bookeeper/bookeeper_data
    Other:   $XDG_DATA_HOME/Bookeeper/bookeeper_data (~/.local/share fallback)
    """
    home = Path.home()
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home
    elif sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        base = Path(xdg) if xdg else home / ".local" / "share"
    return base / APP_FOLDER_NAME / DATA_FOLDER_NAME


class StorageSettings(BaseSettings):
    """Per-user document storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # BOOKEEPER_DATA_DIR redirects all user documents (used for test isolation)
    data_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding one document per user"
    )
    file_extension: str = Field(
        default=".json",
        description="Extension of per-user document files"
    )

    @field_validator("file_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Extensions always carry their leading dot."""
        v = v.strip()
        if not v:
            raise ValueError("file_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @property
    def resolved_data_dir(self) -> Path:
        """The effective data directory."""
        if self.data_dir is not None:
            return self.data_dir.expanduser()
        return default_data_dir()


class LoggingSettings(BaseSettings):
    """structlog output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKEEPER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    render_json: bool = Field(
        default=True,
        description="Render JSON lines (False = console renderer)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
