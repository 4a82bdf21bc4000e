"""Cache maintenance commands."""

from __future__ import annotations

from typing import Annotated

import typer

from wikishelf.cli._context import get_runtime_context
from wikishelf.ui.messages import fatal_error, print_success


def register_cache_commands(cache_app: typer.Typer) -> None:
    """Register cache commands on the cache sub-app."""

    @cache_app.command("stats")
    def stats_command(ctx: typer.Context) -> None:
        """Show cache location, entry count and size."""
        from wikishelf.ui.tables import print_cache_stats
        from wikishelf.wiki.cache import JsonCache

        runtime = get_runtime_context(ctx.obj)
        settings = runtime.settings
        cache = JsonCache(settings.resolved_cache_dir(), settings.cache.ttl_seconds)
        print_cache_stats(cache.stats())

    @cache_app.command("clear")
    def clear_command(
        ctx: typer.Context,
        query: Annotated[
            str | None,
            typer.Option("--query", "-q", help="Only entries for this search query."),
        ] = None,
        series: Annotated[
            str | None,
            typer.Option("--series", "-s", help="Only entries for this series title."),
        ] = None,
    ) -> None:
        """Delete cached entries (all, or those for one query/series)."""
        from wikishelf.wiki.cache import JsonCache

        if query and series:
            fatal_error("Use either --query or --series, not both")
            raise typer.Exit(2)

        runtime = get_runtime_context(ctx.obj)
        settings = runtime.settings
        cache = JsonCache(settings.resolved_cache_dir(), settings.cache.ttl_seconds)

        if query:
            deleted = cache.clear_for_query(query)
        elif series:
            deleted = cache.clear_for_series(series)
        else:
            deleted = cache.clear()

        print_success(f"Deleted {len(deleted)} cache entries")
