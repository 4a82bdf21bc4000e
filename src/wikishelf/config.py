"""
Configuration loading from config.yaml and environment variables.

Setting Sources and Precedence
==============================
1. **Environment** (see wikishelf.env_settings):
   - WIKISHELF_API_URL, WIKISHELF_USER_AGENT, WIKISHELF_TIMEOUT override the
     matching ``wikipedia`` keys from config.yaml
   - LOG_LEVEL overrides ``logging.level``

2. **config.yaml** (structured config, validated by wikishelf.schemas.config):
   - wikipedia: api_url, user_agent, timeout_seconds, search_limit,
     max_retries, min_request_interval
   - cache: enabled, ttl_hours, directory
   - selection: early_exit_volumes, extra_excluded_keywords
   - logging: level, file

3. **Built-in defaults** - a missing config.yaml is not an error.

Path Resolution
===============
- Absolute paths are used as-is
- Relative paths in config.yaml are resolved relative to the file's directory
- The cache directory defaults to the platformdirs cache dir + ``wikipedia``
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from wikishelf.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class WikipediaConfig:
    """MediaWiki API settings (from config.yaml wikipedia section)."""

    api_url: str = "https://en.wikipedia.org/w/api.php"
    user_agent: str = "wikishelf/0.1 (https://github.com/wikishelf/wikishelf)"
    timeout_seconds: float = 30.0
    search_limit: int = 10
    max_retries: int = 3
    # Courtesy delay between consecutive requests
    min_request_interval: float = 0.2


@dataclass
class CacheConfig:
    """On-disk cache settings (from config.yaml cache section)."""

    enabled: bool = True
    ttl_hours: float = 24.0
    directory: Path | None = None

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600


@dataclass
class SelectionConfig:
    """Candidate page selection settings (from config.yaml selection section)."""

    early_exit_volumes: int = 10
    extra_excluded_keywords: list[str] = field(default_factory=list)


@dataclass
class Settings:
    """
    Complete application settings.

    See module docstring for full documentation of setting sources.
    """

    env: str = "production"
    log_level: str = "INFO"
    log_file: Path | None = None
    config_file: Path | None = None
    wikipedia: WikipediaConfig = field(default_factory=WikipediaConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)

    @property
    def is_development(self) -> bool:
        """True when WIKISHELF_ENV names a development environment."""
        return self.env.lower() in ("dev", "development")

    def resolved_cache_dir(self) -> Path:
        """Cache directory, falling back to the platform cache dir."""
        if self.cache.directory is not None:
            return self.cache.directory
        from wikishelf.paths import cache_dir

        return cache_dir(ensure=False) / "wikipedia"


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {config_path}: {e}", config_file=config_path
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file must contain a mapping, got {type(data).__name__}",
            config_file=config_path,
        )
    return data


def load_settings(config_file: Path | None = None) -> Settings:
    """
    Load settings from config.yaml and environment variables.

    Args:
        config_file: Path to config.yaml (default: platform config dir, or
            WIKISHELF_CONFIG)

    Returns:
        Populated Settings object

    Raises:
        ConfigurationError: If config.yaml is present but invalid
    """
    from wikishelf.env_settings import get_env_settings
    from wikishelf.paths import config_file as default_config_file
    from wikishelf.schemas.config import validate_config

    config_path = config_file or default_config_file()

    raw: dict[str, Any] = {}
    if config_path.exists():
        raw = load_yaml_config(config_path)
        logger.debug(f"Loaded config file: {config_path}")
    elif config_file is not None:
        # Explicitly requested files must exist
        raise ConfigurationError(f"Config file not found: {config_path}", config_file=config_path)
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    try:
        schema = validate_config(raw)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field_name = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid config file {config_path}: {first.get('msg', e)}",
            config_file=config_path,
            field=field_name,
        ) from e

    base_dir = config_path.resolve().parent

    def resolve_path(path_str: str) -> Path:
        """Resolve a path, making relative paths relative to the config file."""
        p = Path(path_str).expanduser()
        if p.is_absolute():
            return p
        return (base_dir / p).resolve()

    env = get_env_settings()

    wikipedia = WikipediaConfig(
        api_url=env.wikipedia.api_url or schema.wikipedia.api_url,
        user_agent=env.wikipedia.user_agent or schema.wikipedia.user_agent,
        timeout_seconds=env.wikipedia.timeout or schema.wikipedia.timeout_seconds,
        search_limit=schema.wikipedia.search_limit,
        max_retries=schema.wikipedia.max_retries,
        min_request_interval=schema.wikipedia.min_request_interval,
    )

    cache = CacheConfig(
        enabled=schema.cache.enabled,
        ttl_hours=schema.cache.ttl_hours,
        directory=resolve_path(schema.cache.directory) if schema.cache.directory else None,
    )

    selection = SelectionConfig(
        early_exit_volumes=schema.selection.early_exit_volumes,
        extra_excluded_keywords=list(schema.selection.extra_excluded_keywords),
    )

    # LOG_LEVEL from the environment wins over the file
    log_level = schema.logging.level
    if "LOG_LEVEL" in os.environ:
        log_level = env.app.log_level

    return Settings(
        env=env.app.env,
        log_level=log_level,
        log_file=resolve_path(schema.logging.file) if schema.logging.file else None,
        config_file=config_path if config_path.exists() else None,
        wikipedia=wikipedia,
        cache=cache,
        selection=selection,
    )


# Lazy-loaded global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (lazy-loaded)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings(config_file: Path | None = None) -> Settings:
    """
    Reload settings from files.

    Useful for testing or when config files have changed.

    Args:
        config_file: Path to config.yaml

    Returns:
        Newly loaded Settings object
    """
    global _settings
    _settings = load_settings(config_file)
    return _settings


def clear_settings() -> None:
    """
    Clear the cached settings instance.

    Useful for testing to ensure a fresh settings load.
    """
    global _settings
    _settings = None
