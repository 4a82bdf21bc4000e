"""Runtime context for CLI commands.

Initialized once in the main callback and available to every command via
ctx.obj. Clients are created lazily so offline commands (``parse``,
``cache``) never open a network connection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wikishelf.config import Settings
    from wikishelf.series.service import SeriesService
    from wikishelf.wiki.cache import JsonCache
    from wikishelf.wiki.client import WikipediaClient

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """Typed runtime context available to all commands via ctx.obj.

    Example:
        @app.command()
        def my_command(ctx: typer.Context) -> None:
            runtime: RuntimeContext = ctx.obj
            series = runtime.service.get_series("one piece")
    """

    settings: Settings
    config_path: Path | None = None
    verbose: bool = False
    use_cache: bool = True

    _client: WikipediaClient | None = field(default=None, repr=False)
    _service: SeriesService | None = field(default=None, repr=False)

    @property
    def cache(self) -> JsonCache | None:
        """On-disk cache, or None when disabled by config or ``--no-cache``."""
        if not (self.use_cache and self.settings.cache.enabled):
            return None
        from wikishelf.wiki.cache import JsonCache

        return JsonCache(self.settings.resolved_cache_dir(), self.settings.cache.ttl_seconds)

    @property
    def client(self) -> WikipediaClient:
        """Get or create the Wikipedia client (lazy-loaded)."""
        if self._client is None:
            from wikishelf.wiki.client import WikipediaClient

            self._client = WikipediaClient.from_settings(self.settings, use_cache=self.use_cache)
            logger.debug(f"Wikipedia client initialized for {self.settings.wikipedia.api_url}")
        return self._client

    @property
    def service(self) -> SeriesService:
        """Get or create the series lookup service (lazy-loaded)."""
        if self._service is None:
            from wikishelf.series.service import SeriesService

            self._service = SeriesService(
                self.client,
                cache=self.cache,
                early_exit_volumes=self.settings.selection.early_exit_volumes,
                extra_excluded_keywords=self.settings.selection.extra_excluded_keywords,
            )
        return self._service

    def close(self) -> None:
        """Cleanup resources (close HTTP client)."""
        if self._client is not None:
            self._client.close()
            logger.debug("Wikipedia client closed")
            self._client = None
        self._service = None

    def __enter__(self) -> RuntimeContext:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit - cleanup resources."""
        self.close()


def get_runtime_context(ctx_obj: object) -> RuntimeContext:
    """Extract RuntimeContext from typer context object.

    Raises:
        TypeError: If the main callback did not initialize ctx.obj
    """
    if isinstance(ctx_obj, RuntimeContext):
        return ctx_obj
    raise TypeError(
        f"Expected RuntimeContext, got {type(ctx_obj).__name__}. "
        "Ensure the main callback initializes ctx.obj properly."
    )
