"""Lookup commands: series, search, parse."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from wikishelf.cli._app import LOOKUP_COMMANDS
from wikishelf.cli._context import RuntimeContext, get_runtime_context
from wikishelf.exceptions import WikishelfError
from wikishelf.ui.core import console, err_console
from wikishelf.ui.messages import fatal_error, print_info

logger = logging.getLogger(__name__)


def _lookup_failed(runtime: RuntimeContext, error: WikishelfError) -> typer.Exit:
    """Report a failed lookup; call from inside the ``except`` block."""
    from wikishelf.utils.circuit_breaker import get_breaker_status

    logger.debug(f"Circuit breaker status: {get_breaker_status()}")
    fatal_error(str(error))
    if runtime.settings.is_development:
        err_console.print_exception()
    return typer.Exit(1)


def register_lookup_commands(app: typer.Typer) -> None:
    """Register lookup commands on the app."""

    @app.command("series", rich_help_panel=LOOKUP_COMMANDS)
    def series_command(
        ctx: typer.Context,
        query: Annotated[str, typer.Argument(help="Series name to look up.")],
        json_output: Annotated[
            bool,
            typer.Option("--json", "-j", help="Output as JSON."),
        ] = False,
        all_series: Annotated[
            bool,
            typer.Option("--all", "-a", help="Return related series as separate entries."),
        ] = False,
    ) -> None:
        """Look up a series' volume list.

        [bold]Examples:[/]
          wikishelf series "one piece"
          wikishelf series "ascendance of a bookworm" --all --json
        """
        from wikishelf.ui.tables import print_related_series_table, print_series_table

        runtime = get_runtime_context(ctx.obj)
        try:
            if all_series:
                results = runtime.service.get_all_series_from_page(query)
            else:
                found = runtime.service.get_series(query)
                results = [found] if found is not None else []
        except WikishelfError as e:
            raise _lookup_failed(runtime, e) from e

        if not results:
            fatal_error(f"No series found for '{query}'", "Try the full English series title")
            raise typer.Exit(1)

        if json_output:
            payload = (
                [s.to_json_dict() for s in results] if all_series else results[0].to_json_dict()
            )
            console.print_json(json.dumps(payload, ensure_ascii=False))
            return

        for i, series in enumerate(results):
            if i:
                console.print()
            print_series_table(series)
            if series.related_series:
                print_related_series_table(series.related_series)

    @app.command("search", rich_help_panel=LOOKUP_COMMANDS)
    def search_command(
        ctx: typer.Context,
        query: Annotated[str, typer.Argument(help="Search text.")],
        limit: Annotated[
            int,
            typer.Option("--limit", "-n", min=1, max=50, help="Number of search results."),
        ] = 10,
    ) -> None:
        """Show ranked candidate pages for a query.

        Excluded results (films, TV series, episodes, ...) are not listed.
        """
        from wikishelf.series.selector import rank_candidates
        from wikishelf.ui.tables import print_candidates_table

        runtime = get_runtime_context(ctx.obj)
        try:
            titles = runtime.client.search_titles(query, limit=limit)
        except WikishelfError as e:
            raise _lookup_failed(runtime, e) from e

        ranked = rank_candidates(
            titles, query, runtime.settings.selection.extra_excluded_keywords
        )
        print_candidates_table(ranked, query)

    @app.command("parse", rich_help_panel=LOOKUP_COMMANDS)
    def parse_command(
        file: Annotated[
            Path,
            typer.Argument(
                exists=True, dir_okay=False, readable=True, help="File with page markup."
            ),
        ],
        title: Annotated[
            str | None,
            typer.Option("--title", "-t", help="Page title (default: file name stem)."),
        ] = None,
        json_output: Annotated[
            bool,
            typer.Option("--json", "-j", help="Output the assembled series as JSON."),
        ] = False,
    ) -> None:
        """Parse saved page markup offline (no network access).

        Transclusions are not expanded.
        """
        from wikishelf.parsing.markup import canonical_series_title
        from wikishelf.parsing.sections import parse_sections
        from wikishelf.series.assembler import assemble_series
        from wikishelf.ui.tables import (
            print_related_series_table,
            print_sections_table,
            print_series_table,
        )

        markup = file.read_text(encoding="utf-8")
        page_title = title or file.stem
        sections = parse_sections(markup, page_title)
        series = assemble_series(
            title=canonical_series_title(page_title),
            page_id=0,
            sections=sections,
            markup=markup,
        )

        if json_output:
            console.print_json(json.dumps(series.to_json_dict(), ensure_ascii=False))
            return

        print_info(f"{len(sections)} section(s) parsed from {file.name}")
        print_sections_table(sections)
        console.print()
        print_series_table(series)
        if series.related_series:
            print_related_series_table(series.related_series)
