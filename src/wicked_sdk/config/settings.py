# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""SDK settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK configuration settings.

    All settings can be overridden via environment variables prefixed with
    ``WICKED_``. The portal API URL is read from ``PORTAL_API_URL`` so that
    every component of a deployment shares the same variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="WICKED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Portal API
    portal_api_url: str = Field(
        default="",
        validation_alias=AliasChoices("portal_api_url", "PORTAL_API_URL"),
    )
    portal_api_timeout: float = 2.0

    # Kong adapter / Kong OAuth2
    kong_timeout: float = 5.0

    # Await (retry-poll) defaults
    await_attempt_timeout: float = 2.0
    await_status_code: int = 200
    await_max_tries: int = 100
    await_retry_delay: float = 1.0  # seconds between attempts

    # Config hash watchdog
    config_hash_poll_interval: float = 10.0
    exit_grace_seconds: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Observability
    metrics_enabled: bool = True
    metrics_prefix: str = "wicked_sdk"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("portal_api_url")
    @classmethod
    def strip_portal_api_url(cls, v: str) -> str:
        return v.strip()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
