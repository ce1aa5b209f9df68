"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
There are no external services, so this only holds the knobs that
change how the month view is computed and how much history is kept.
"""

from functools import lru_cache
from typing import Union

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


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
        description="Enable debug mode (logs navigation events too)"
    )

    # Calendar
    week_start_day: int = Field(
        default=6,
        ge=0,
        le=6,
        description="First day of the week (0=Monday ... 6=Sunday)"
    )

    # Validation thresholds
    max_bill_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable bill amount (for sanity checking)"
    )

    # Audit trail
    audit_history_limit: int = Field(
        default=500,
        ge=1,
        le=100000,
        description="How many audit events are kept in memory"
    )


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
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns {setting_name: is_valid}, plus "<setting_name>_error" with the
    error message for each group that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except ValidationError as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
