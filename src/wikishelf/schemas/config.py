"""
Pydantic schema for config.yaml validation.

This validates the YAML structure at load time before converting to dataclasses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class WikipediaSchema(BaseModel):
    """MediaWiki connection settings."""

    api_url: str = "https://en.wikipedia.org/w/api.php"
    user_agent: str = "wikishelf/0.1 (https://github.com/wikishelf/wikishelf)"
    timeout_seconds: float = Field(default=30.0, gt=0)
    search_limit: int = Field(default=10, ge=1, le=50)
    max_retries: int = Field(default=3, ge=0)
    min_request_interval: float = Field(default=0.2, ge=0)

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Ensure the API URL is absolute http(s)."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    model_config = {"extra": "forbid"}


class CacheSchema(BaseModel):
    """On-disk cache settings."""

    enabled: bool = True
    ttl_hours: float = Field(default=24.0, gt=0)
    directory: str | None = None

    model_config = {"extra": "forbid"}


class SelectionSchema(BaseModel):
    """Candidate page selection settings."""

    early_exit_volumes: int = Field(default=10, ge=1)
    extra_excluded_keywords: list[str] = Field(default_factory=list)

    @field_validator("extra_excluded_keywords")
    @classmethod
    def lower_keywords(cls, v: list[str]) -> list[str]:
        """Keywords are matched against lower-cased titles."""
        return [k.lower() for k in v if k.strip()]

    model_config = {"extra": "forbid"}


class LoggingSchema(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    file: str | None = None

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    model_config = {"extra": "forbid"}


class ConfigSchema(BaseModel):
    """Root config.yaml schema."""

    wikipedia: WikipediaSchema = Field(default_factory=WikipediaSchema)
    cache: CacheSchema = Field(default_factory=CacheSchema)
    selection: SelectionSchema = Field(default_factory=SelectionSchema)
    logging: LoggingSchema = Field(default_factory=LoggingSchema)

    model_config = {"extra": "forbid"}


def validate_config(data: dict[str, Any]) -> ConfigSchema:
    """
    Validate raw config.yaml data.

    Args:
        data: Parsed YAML mapping

    Returns:
        Validated ConfigSchema instance

    Raises:
        pydantic.ValidationError: If a section has unknown keys or bad values
    """
    return ConfigSchema.model_validate(data)
