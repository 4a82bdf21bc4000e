"""MediaWiki access: HTTP client and on-disk cache."""

from wikishelf.wiki.cache import PARSER_CACHE_VERSION, CacheStats, JsonCache, cache_key
from wikishelf.wiki.client import PageSource, WikipediaClient

__all__ = [
    "PARSER_CACHE_VERSION",
    "CacheStats",
    "JsonCache",
    "PageSource",
    "WikipediaClient",
    "cache_key",
]
