"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


DEFAULT_NAME_FORMAT = "{!LastName} Household"
DEFAULT_FORMAL_GREETING_FORMAT = "{!{!Salutation} {!FirstName}} {!LastName}"
DEFAULT_INFORMAL_GREETING_FORMAT = "{!{!FirstName}}"
DEFAULT_RESET_PLACEHOLDER = "(replace)"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with HHN_) or .env file.

    Examples:
        HHN_ADVANCED_NAMING_ENABLED=false
        HHN_NAMING_STRATEGY=legacy
        HHN_NAME_FORMAT="{!LastName} Family"
        HHN_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="HHN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Household Names"
    environment: Environment = Environment.DEVELOPMENT

    # Database
    sqlite_path: Path = Field(
        default=Path.home() / ".household_names" / "households.db",
        description="SQLite database file path",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default=None,
        validate_default=True,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Household naming
    advanced_naming_enabled: bool = Field(
        default=True,
        description="Compute Name and greetings; when off only member counts are maintained",
    )
    naming_strategy: str = Field(
        default="format", description="Registered naming strategy identifier"
    )
    name_format: str = DEFAULT_NAME_FORMAT
    formal_greeting_format: str = DEFAULT_FORMAL_GREETING_FORMAT
    informal_greeting_format: str = DEFAULT_INFORMAL_GREETING_FORMAT
    name_connector: str = "and"
    name_overrun: str = "Family"
    contact_overrun_count: int = Field(default=9, ge=1)
    reset_placeholder: str = DEFAULT_RESET_PLACEHOLDER

    # Bulk refresh
    batch_size: int = Field(default=200, ge=1, le=2000)

    @field_validator("reset_placeholder", mode="after")
    @classmethod
    def validate_reset_placeholder(cls, v: str) -> str:
        """An empty placeholder would be indistinguishable from a cleared field."""
        if not v.strip():
            raise ValueError("reset_placeholder must not be blank")
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
