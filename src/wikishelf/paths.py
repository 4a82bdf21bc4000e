"""Cross-platform path handling using platformdirs.

Provides XDG-compliant paths with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from platformdirs import user_cache_dir, user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "wikishelf"
APPAUTHOR: Literal[False] = False  # Avoid "CompanyName/AppName" nesting on Windows


def _env_override(env_var: str) -> Path | None:
    """Check for environment variable override.

    Args:
        env_var: Environment variable name to check

    Returns:
        Path from environment variable if set, None otherwise
    """
    v = os.environ.get(env_var)
    return Path(v).expanduser() if v else None


def cache_dir(*, ensure: bool = True) -> Path:
    """Get application cache directory.

    Linux: ~/.cache/wikishelf
    macOS: ~/Library/Caches/wikishelf
    Windows: C:\\Users\\<user>\\AppData\\Local\\wikishelf\\Cache

    Override with WIKISHELF_CACHE_DIR env var.

    Args:
        ensure: Create directory if it doesn't exist

    Returns:
        Path to cache directory
    """
    d = _env_override("WIKISHELF_CACHE_DIR") or Path(user_cache_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def config_file() -> Path:
    """Get the default config.yaml location.

    Override with WIKISHELF_CONFIG env var. Does NOT auto-create anything;
    a missing file simply means defaults apply.

    Returns:
        Path to config.yaml
    """
    override = _env_override("WIKISHELF_CONFIG")
    if override:
        return override
    return Path(user_config_dir(APP_NAME, APPAUTHOR)) / "config.yaml"
