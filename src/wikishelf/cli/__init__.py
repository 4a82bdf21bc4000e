"""wikishelf CLI built with Typer and Rich.

Commands:
- series / search / parse - lookups (see wikishelf.cli.lookup)
- cache stats / cache clear - on-disk cache maintenance
"""

from __future__ import annotations

import sys

from wikishelf.cli._app import (
    LOOKUP_COMMANDS,
    MAINTENANCE_COMMANDS,
    create_main_callback,
    make_app,
    make_cache_app,
)
from wikishelf.cli._context import RuntimeContext, get_runtime_context
from wikishelf.cli.cache import register_cache_commands
from wikishelf.cli.lookup import register_lookup_commands

# Create main app and sub-apps
app = make_app()
cache_app = make_cache_app()

app.add_typer(cache_app, name="cache", rich_help_panel=MAINTENANCE_COMMANDS)

# Register main callback (handles --version, --verbose, --config, --no-cache)
create_main_callback(app)

register_lookup_commands(app)
register_cache_commands(cache_app)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = [
    "LOOKUP_COMMANDS",
    "MAINTENANCE_COMMANDS",
    "RuntimeContext",
    "app",
    "cache_app",
    "get_runtime_context",
    "main",
]

if __name__ == "__main__":
    sys.exit(main())
