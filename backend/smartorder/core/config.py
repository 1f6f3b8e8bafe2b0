"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration management with validation,
loading settings from environment variables and .env files.
"""

from typing import Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_DATABASE_SCHEMES = ["sqlite", "sqlite+aiosqlite", "postgresql", "postgresql+asyncpg"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Credentials embedded in DATABASE_URL belong in the .env file (gitignored).
    """

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/smartorder.db",
        description="Database connection URL (SQLite by default, PostgreSQL-ready format)"
    )
    sql_echo: bool = Field(
        default=False,
        description="Echo every emitted SQL statement (debug only)"
    )
    create_schema_on_startup: bool = Field(
        default=False,
        description="Let init_db() run create_all instead of relying on migrations"
    )

    # Store behaviour
    category_delete_policy: Literal["restrict", "cascade"] = Field(
        default="restrict",
        description=(
            "What deleting a category still referenced by products does: "
            "'restrict' lets the foreign key reject it, 'cascade' deletes the products too"
        )
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )
    log_json: bool = Field(
        default=True,
        description="Emit structured JSON logs (False for plain text)"
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Ensures URL has a supported scheme and is not empty.
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        if not any(v.startswith(scheme + "://") for scheme in VALID_DATABASE_SCHEMES):
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(VALID_DATABASE_SCHEMES)}. "
                f"Got: {v[:20]}..."
            )

        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of: {', '.join(VALID_LOG_LEVELS)}. Got: {v}"
            )
        return level


# Global settings instance
# Import this instance throughout the application
settings = Settings()
