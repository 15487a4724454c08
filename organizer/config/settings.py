"""
Configuration Management for Personal Organizer

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see where data lives and how often reminders fire,
and ensures all configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ORGANIZER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["json", "memory"] = Field(
        default="json",
        description="Which record store backend to use"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per collection"
    )
    # Only the memory backend enforces a quota, like browser local storage
    quota_bytes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum total serialized size for the memory backend"
    )


class ReminderSettings(BaseSettings):
    """Incomplete-task reminder configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ORGANIZER_REMINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Run the periodic reminder loop"
    )
    interval_seconds: int = Field(
        default=3600,
        ge=1,
        description="Seconds between reminder passes"
    )
    header: str = Field(
        default="Reminder: you have {count} incomplete task(s):",
        description="First line of the reminder; {count} is substituted"
    )

    @field_validator('header')
    @classmethod
    def validate_header(cls, v: str) -> str:
        """The header must be formattable with only a count."""
        try:
            v.format(count=0)
        except (AttributeError, KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Reminder header is not a valid template: {e}")
        return v


class AuditSettings(BaseSettings):
    """Audit trail configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ORGANIZER_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_path: Optional[Path] = Field(
        default=None,
        description="JSON-lines file for audit events (local logging only if unset)"
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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the standard library root logger"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def reminders(self) -> ReminderSettings:
        return ReminderSettings()

    @property
    def audit(self) -> AuditSettings:
        return AuditSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    ``<setting_name>_error`` entry for every section that failed.
    Useful for startup checks and the settings page.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "reminders", "audit", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
