"""
Configuration Management for Net Worth

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Rate provider endpoints, timeouts and cache bounds are visible in one place
and validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateProviderSettings(BaseSettings):
    """Remote exchange rate provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RATES_",
        extra="ignore"
    )

    primary_base_url: str = Field(
        default="https://api.frankfurter.app",
        description="Base URL of the primary (historical) rate provider"
    )
    secondary_base_url: str = Field(
        default="https://api.exchangerate-api.com/v4",
        description="Base URL of the secondary (broad coverage) rate provider"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        ge=0.5,
        le=120.0,
        description="Timeout for a single HTTP request"
    )
    retry_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts per provider for transient transport failures"
    )
    retry_wait_min_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum backoff between attempts"
    )
    retry_wait_max_seconds: float = Field(
        default=4.0,
        ge=0.0,
        description="Maximum backoff between attempts"
    )

    @field_validator('primary_base_url', 'secondary_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined with '/', so drop any trailing slash."""
        return v.rstrip("/")

    @property
    def fetch_timeout_seconds(self) -> float:
        """Upper bound for one provider call including retries."""
        return self.request_timeout_seconds * self.retry_attempts + 1.0


class RateCacheSettings(BaseSettings):
    """In-memory rate cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_CACHE_",
        extra="ignore"
    )

    ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long a fetched rate may be reused (5 minutes)"
    )
    max_entries: int = Field(
        default=1024,
        ge=1,
        description="Maximum cached (from, to, date) triples before LRU eviction"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    preferred_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency in which aggregated totals are shown"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local logs"
    )

    @field_validator('preferred_currency', 'log_level')
    @classmethod
    def upper_case(cls, v: str) -> str:
        return v.strip().upper()


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
    def rates(self) -> RateProviderSettings:
        return RateProviderSettings()

    @property
    def cache(self) -> RateCacheSettings:
        return RateCacheSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    sections = {
        "rates": lambda: settings.rates,
        "cache": lambda: settings.cache,
        "app": lambda: settings.app,
    }
    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
