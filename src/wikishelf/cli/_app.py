"""App configuration and the main callback for the CLI.

Contains the Typer application factories, the global options callback
(``--version``, ``--verbose``, ``--config``, ``--no-cache``) and the logging
setup helper.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from wikishelf import __version__
from wikishelf.cli._context import RuntimeContext
from wikishelf.exceptions import ConfigurationError
from wikishelf.ui.core import console
from wikishelf.ui.messages import fatal_error

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

LOOKUP_COMMANDS = "Lookup"
MAINTENANCE_COMMANDS = "Maintenance"


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[title]wikishelf[/] {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================


MAIN_EPILOG = """
[bold cyan]Examples:[/]
  wikishelf series "demon slayer"          [dim]# Volume list as a table[/]
  wikishelf series "bookworm" --all --json [dim]# Main + related series as JSON[/]
  wikishelf search "spy x family"          [dim]# Show ranked candidate pages[/]
  wikishelf parse page.wiki --title "X"    [dim]# Parse saved markup offline[/]

[dim]Global flags like [green]--no-cache[/] go [bold]BEFORE[/] the command.[/]
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="wikishelf",
        help="Manga and light novel bibliographies from Wikipedia volume lists",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


CACHE_EPILOG = """
[bold cyan]Common Tasks:[/]
  wikishelf cache stats                  [dim]# Entry count and size[/]
  wikishelf cache clear --query "one piece" [dim]# Forget one lookup[/]
  wikishelf cache clear                  [dim]# Remove everything[/]
"""


def make_cache_app() -> typer.Typer:
    """Create the cache maintenance sub-app."""
    return typer.Typer(
        name="cache",
        help="Inspect and clear the on-disk Wikipedia cache",
        epilog=CACHE_EPILOG,
        rich_markup_mode="rich",
        no_args_is_help=True,
    )


# =============================================================================
# Logging Setup Helper
# =============================================================================


def setup_logging(verbose: bool, log_level: str, log_file: Path | None) -> None:
    """Configure logging based on options."""
    from wikishelf.logging_setup import setup_logging as _setup_logging

    _setup_logging(
        log_level="DEBUG" if verbose else log_level,
        log_file=log_file,
        rich_console=True,
        quiet_console=not verbose,
    )


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback()
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) logging."),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to config.yaml (default: platform config dir).",
            ),
        ] = None,
        no_cache: Annotated[
            bool,
            typer.Option("--no-cache", help="Bypass the on-disk cache."),
        ] = False,
    ) -> None:
        """Look up manga and light novel volume lists on Wikipedia."""
        from wikishelf.config import reload_settings

        try:
            settings = reload_settings(config_file=config)
        except ConfigurationError as e:
            fatal_error(str(e), "Check the file against the documented config keys")
            raise typer.Exit(1) from e

        setup_logging(verbose, settings.log_level, settings.log_file)
        logger.debug(f"Settings loaded (config={settings.config_file})")

        runtime = RuntimeContext(
            settings=settings,
            config_path=config,
            verbose=verbose,
            use_cache=not no_cache,
        )
        ctx.obj = runtime
        ctx.call_on_close(runtime.close)
