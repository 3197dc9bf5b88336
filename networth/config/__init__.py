"""Configuration package."""

from networth.config.settings import (
    AppSettings,
    RateCacheSettings,
    RateProviderSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "RateCacheSettings",
    "RateProviderSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
