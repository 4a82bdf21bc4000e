"""Environment-based settings using pydantic-settings.

This module provides type-safe environment variable loading with validation.
Environment values take precedence over config.yaml for the connection fields.

Usage:
    from wikishelf.env_settings import get_env_settings

    env = get_env_settings()
    print(env.wikipedia.api_url)  # From WIKISHELF_API_URL env var

Environment Variables:
    Wikipedia:
        WIKISHELF_API_URL - MediaWiki API endpoint
            (default: "https://en.wikipedia.org/w/api.php")
        WIKISHELF_USER_AGENT - User-Agent header sent with every request
        WIKISHELF_TIMEOUT - Request timeout in seconds

    Application:
        WIKISHELF_ENV - Environment name (default: "production")
        LOG_LEVEL - Logging level (default: "INFO")

    Path Overrides (from platformdirs):
        WIKISHELF_CACHE_DIR - Override cache directory
        WIKISHELF_CONFIG - Override config.yaml location
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _validate_url_field(v: str | None, field_name: str) -> str | None:
    """Validate URL format (shared validator).

    Args:
        v: The URL value to validate.
        field_name: Name of the field for error messages.

    Returns:
        The validated URL with trailing slash stripped.

    Raises:
        ValueError: If URL doesn't start with http:// or https://.
    """
    if v and not v.startswith(("http://", "https://")):
        raise ValueError(f"{field_name} must start with http:// or https://, got: {v}")
    return v.rstrip("/") if v else v


class WikipediaEnvSettings(BaseSettings):
    """MediaWiki connection overrides from environment variables.

    Reads from WIKISHELF_API_URL, WIKISHELF_USER_AGENT, WIKISHELF_TIMEOUT.
    Unset values stay None so config.yaml (or built-in defaults) apply.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIKISHELF_",
        extra="ignore",
    )

    api_url: str | None = Field(default=None, description="MediaWiki API endpoint")
    user_agent: str | None = Field(default=None, description="User-Agent header")
    timeout: float | None = Field(default=None, description="Request timeout in seconds")

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str | None) -> str | None:
        """Validate API URL format."""
        return _validate_url_field(v, "WIKISHELF_API_URL")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Reject non-positive timeouts."""
        if v is not None and v <= 0:
            raise ValueError(f"WIKISHELF_TIMEOUT must be positive, got: {v}")
        return v


class AppEnvSettings(BaseSettings):
    """Application-level settings from environment variables.

    Reads from WIKISHELF_ENV, LOG_LEVEL env vars.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    env: str = Field(
        default="production",
        validation_alias="WIKISHELF_ENV",
        description="Environment name (development/production)",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got: {v}")
        return upper


class EnvSettings(BaseSettings):
    """Combined environment settings.

    Use get_env_settings() to get a cached instance.

    Example:
        env = get_env_settings()
        print(env.wikipedia.api_url)
        print(env.app.log_level)
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    wikipedia: WikipediaEnvSettings = Field(default_factory=WikipediaEnvSettings)
    app: AppEnvSettings = Field(default_factory=AppEnvSettings)


@lru_cache(maxsize=1)
def get_env_settings() -> EnvSettings:
    """Get cached environment settings.

    Returns:
        EnvSettings instance with all environment-based configuration.
    """
    return EnvSettings()


def clear_env_settings_cache() -> None:
    """Clear the cached environment settings.

    Useful for testing to ensure fresh settings are loaded.
    """
    get_env_settings.cache_clear()


def load_env_settings_from_file(env_file: Path) -> EnvSettings:
    """Load environment settings from a specific .env file.

    Args:
        env_file: Path to .env file to load.

    Returns:
        EnvSettings instance with configuration from the file.
    """
    from dotenv import load_dotenv

    load_dotenv(env_file, override=True)

    clear_env_settings_cache()
    return get_env_settings()
