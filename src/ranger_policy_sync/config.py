"""Configuration management for Ranger policy reconciliation.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from __future__ import annotations

import base64
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the RANGER_ prefix (e.g., RANGER_ENDPOINT).
    """

    model_config = SettingsConfigDict(
        env_prefix="RANGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ranger Admin Configuration
    endpoint: str | None = Field(
        default=None,
        description="Base URL of the Ranger Admin REST API (e.g. http://ranger-host:6080)",
    )
    username: str | None = Field(
        default=None,
        description="Ranger username with administrative privileges (basic auth)",
    )
    password: SecretStr | None = Field(
        default=None,
        description="Password for the Ranger user",
    )
    insecure: bool = Field(
        default=False,
        description="Disable TLS certificate verification for self-signed endpoints",
    )
    timeout: float = Field(
        default=30.0,
        description="Timeout for Ranger API requests in seconds",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (forces DEBUG log level)",
    )

    @field_validator("endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.rstrip("/")


def build_auth_header(username: str, password: str) -> str:
    """Build a Basic authorization header value.

    Args:
        username: Ranger username.
        password: Ranger password.

    Returns:
        The header value, e.g. ``"Basic YWRtaW46c2VjcmV0"``.
    """
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
