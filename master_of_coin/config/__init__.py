"""Configuration package."""

from master_of_coin.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    Settings,
    WorkbookSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "Settings",
    "WorkbookSettings",
    "get_settings",
    "validate_all_settings",
]
