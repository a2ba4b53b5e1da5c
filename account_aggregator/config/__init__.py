"""Configuration package."""

from account_aggregator.config.settings import (
    AppSettings,
    DisplaySettings,
    FetchSettings,
    RegionalApiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DisplaySettings",
    "FetchSettings",
    "RegionalApiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
