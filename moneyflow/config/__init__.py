"""Configuration package."""

from moneyflow.config.settings import (
    GeminiSettings,
    GeneralSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "GeminiSettings",
    "GeneralSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
