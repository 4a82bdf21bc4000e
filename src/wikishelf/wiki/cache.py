"""
On-disk JSON cache for MediaWiki lookups and parsed results.

Each entry is one JSON file named ``<kind>_<sanitized>.json`` where the
sanitized part is the lower-cased request value with every run of
characters outside ``[a-z0-9]`` collapsed to ``_`` and capped at 100
characters. Entries expire by file mtime.

Raw fetches (``search``, ``page_title``) stay valid across parser changes.
Parsed results (``series``, ``all_series``) carry PARSER_CACHE_VERSION in
their prefix; bump it whenever section parsing or classification changes.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wikishelf.exceptions import CacheError

logger = logging.getLogger(__name__)

PARSER_CACHE_VERSION = 4

MAX_KEY_LENGTH = 100

KIND_SEARCH = "search"
KIND_PAGE = "page_title"
KIND_SERIES = "series"
KIND_ALL_SERIES = "all_series"

# Kinds whose payload depends on parser behaviour
VERSIONED_KINDS = frozenset({KIND_SERIES, KIND_ALL_SERIES})

_UNSAFE_RUN = re.compile(r"[^a-z0-9]+")


def sanitize_key(value: str) -> str:
    """
    Lower-case, collapse unsafe character runs to ``_`` and cap the length.

    Example:
        >>> sanitize_key("Demon Slayer: Kimetsu no Yaiba")
        'demon_slayer_kimetsu_no_yaiba'
    """
    return _UNSAFE_RUN.sub("_", value.lower())[:MAX_KEY_LENGTH]


def cache_key(kind: str, value: str) -> str:
    """File name for a cache entry, including the parser version where relevant."""
    prefix = f"{kind}_v{PARSER_CACHE_VERSION}" if kind in VERSIONED_KINDS else kind
    return f"{prefix}_{sanitize_key(value)}.json"


@dataclass(frozen=True)
class CacheStats:
    """Entry count and on-disk size of a cache directory."""

    directory: Path
    entry_count: int
    total_size_bytes: int


class JsonCache:
    """
    File-per-entry JSON cache with a time-to-live.

    Example:
        >>> cache = JsonCache(Path("~/.cache/wikishelf/wikipedia").expanduser())
        >>> cache.set("search", "one piece", ["One Piece"])
        >>> cache.get("search", "one piece")
        ['One Piece']
    """

    def __init__(self, directory: Path, ttl_seconds: float = 24 * 3600) -> None:
        self.directory = directory
        self.ttl_seconds = ttl_seconds

    def path_for(self, kind: str, value: str) -> Path:
        return self.directory / cache_key(kind, value)

    def get(self, kind: str, value: str) -> Any | None:
        """
        Read an entry.

        Expired entries are deleted. Missing, unreadable or corrupt entries are
        treated as a miss.

        Returns:
            Decoded JSON payload, or None on a miss
        """
        path = self.path_for(kind, value)
        try:
            age = time.time() - path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug(f"Cache stat failed for {path.name}: {e}")
            return None

        if age > self.ttl_seconds:
            logger.debug(f"Cache entry expired: {path.name}")
            with contextlib.suppress(OSError):
                path.unlink()
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(f"Ignoring unreadable cache entry {path.name}: {e}")
            return None

        logger.debug(f"Cache hit: {path.name}")
        return data

    def set(self, kind: str, value: str, data: Any) -> Path:
        """
        Write an entry atomically (temp file + os.replace).

        Raises:
            CacheError: If the entry cannot be written
        """
        path = self.path_for(kind, value)
        temp_file = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, path)
        except (OSError, TypeError, ValueError) as e:
            with contextlib.suppress(OSError):
                temp_file.unlink()
            raise CacheError(f"Failed to write cache entry: {e}", cache_file=path) from e

        logger.debug(f"Cached {path.name}")
        return path

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def _entries(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.iterdir() if p.is_file() and p.suffix == ".json")

    def stats(self) -> CacheStats:
        """Count entries and their total size."""
        total = 0
        entries = self._entries()
        for entry in entries:
            with contextlib.suppress(OSError):
                total += entry.stat().st_size
        return CacheStats(
            directory=self.directory, entry_count=len(entries), total_size_bytes=total
        )

    def _delete(self, entries: list[Path]) -> list[str]:
        deleted: list[str] = []
        for entry in entries:
            try:
                entry.unlink()
            except FileNotFoundError:
                continue
            deleted.append(entry.name)
        if deleted:
            logger.info(f"Deleted {len(deleted)} cache entr{'y' if len(deleted) == 1 else 'ies'}")
        return deleted

    def clear(self) -> list[str]:
        """Delete every entry. Returns the deleted file names."""
        return self._delete(self._entries())

    def clear_for_query(self, query: str) -> list[str]:
        """Delete search, parsed-series and page entries mentioning ``query``."""
        needle = sanitize_key(query)
        prefixes = (f"{KIND_SEARCH}_", f"{KIND_SERIES}_", f"{KIND_ALL_SERIES}_", f"{KIND_PAGE}_")
        return self._delete(
            [p for p in self._entries() if p.name.startswith(prefixes) and needle in p.name]
        )

    def clear_for_series(self, title: str) -> list[str]:
        """Delete parsed-series and page entries mentioning ``title``."""
        needle = sanitize_key(title)
        prefixes = (f"{KIND_SERIES}_", f"{KIND_PAGE}_")
        return self._delete(
            [p for p in self._entries() if p.name.startswith(prefixes) and needle in p.name]
        )
