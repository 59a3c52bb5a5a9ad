"""Configuration package."""

from bookkeeper.config.settings import (
    LoggingSettings,
    Settings,
    StorageSettings,
    default_data_dir,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "default_data_dir",
    "get_settings",
]
