"""wikishelf - Manga and light novel bibliographies from Wikipedia volume lists."""

from wikishelf.exceptions import (
    CacheError,
    ConfigurationError,
    NetworkError,
    WikipediaError,
    WikishelfError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Base exception
    "WikishelfError",
    # Configuration
    "ConfigurationError",
    # Network
    "NetworkError",
    "WikipediaError",
    # Cache
    "CacheError",
]
