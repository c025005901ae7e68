"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() so the .env file is read once per process.

Usage:
    from backend.settings import get_settings, Settings

    settings = get_settings()
    print(settings.api_base_url)

    # Tests
    settings = Settings(environment="test", _env_file=None)
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.services.report_paginator import LayoutConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the CLI",
    )

    # -------------------------------------------------------------------------
    # Remote API
    # -------------------------------------------------------------------------
    api_base_url: str = Field(
        default="https://my-pt-book-app-backend.vercel.app/api",
        description="Base URL of the trainer backend REST API",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each gateway request",
    )
    auth_token: Optional[str] = Field(
        default=None,
        description="Bearer token to start with (CLI use); normally set by login",
    )

    # -------------------------------------------------------------------------
    # Report Layout (points)
    # -------------------------------------------------------------------------
    report_page_height: float = Field(default=692.0, description="Content height per page")
    report_first_page_reserved: float = Field(default=220.0)
    report_session_header_height: float = Field(default=45.0)
    report_session_spacing: float = Field(default=40.0)
    report_exercise_row_height: float = Field(default=30.0)
    report_group_header_height: float = Field(default=40.0)

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level '{v}'")
        return level

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    def layout_config(self) -> LayoutConfig:
        """Report layout constants as a validated LayoutConfig."""
        return LayoutConfig(
            page_height=self.report_page_height,
            first_page_reserved=self.report_first_page_reserved,
            session_header_height=self.report_session_header_height,
            session_spacing=self.report_session_spacing,
            exercise_row_height=self.report_exercise_row_height,
            group_header_height=self.report_group_header_height,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    For testing, clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
