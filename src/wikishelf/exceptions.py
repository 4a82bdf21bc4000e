"""
wikishelf exception hierarchy.

Provides typed exceptions for better error handling and clearer error messages.

Exception Hierarchy:
    WikishelfError (base)
    ├── ConfigurationError - Config file issues, invalid settings
    ├── NetworkError - External service communication failures
    │   └── WikipediaError - MediaWiki API failures
    └── CacheError - On-disk cache write failures

"Not found" outcomes (no search results, no page with volume data) are never
raised - lookups return None or an empty list instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class WikishelfError(Exception):
    """Base exception for all wikishelf errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize wikishelf exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(WikishelfError):
    """Configuration file or settings error."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if config_file:
            details["config_file"] = str(config_file)
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.config_file = config_file
        self.field = field


# =============================================================================
# Network Errors
# =============================================================================


class NetworkError(WikishelfError):
    """External service communication failure."""

    def __init__(
        self,
        message: str,
        *,
        service: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if service:
            details["service"] = service
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.service = service
        self.url = url
        self.status_code = status_code


class WikipediaError(NetworkError):
    """MediaWiki API failure."""

    def __init__(self, message: str, *, title: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("service", "wikipedia")
        details = kwargs.get("details") or {}
        if title:
            details["title"] = title
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.title = title


# =============================================================================
# Cache Errors
# =============================================================================


class CacheError(WikishelfError):
    """On-disk cache failure."""

    def __init__(
        self,
        message: str,
        *,
        cache_file: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if cache_file:
            details["cache_file"] = str(cache_file)
        super().__init__(message, details=details)
        self.cache_file = cache_file
