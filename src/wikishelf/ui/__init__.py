"""wikishelf UI - Rich console output components.

Modules:
    core: Console instances and theme
    messages: Simple print helpers (success, warning, info, fatal error)
    tables: Table formatters for series, candidates, sections, cache stats

Usage:
    from wikishelf.ui import console, print_success
    from wikishelf.ui.tables import print_series_table
"""

from __future__ import annotations

from wikishelf.ui.core import WIKISHELF_THEME, console, err_console
from wikishelf.ui.messages import fatal_error, print_info, print_success, print_warning
from wikishelf.ui.tables import (
    print_cache_stats,
    print_candidates_table,
    print_related_series_table,
    print_sections_table,
    print_series_table,
)

__all__ = [
    "WIKISHELF_THEME",
    "console",
    "err_console",
    "fatal_error",
    "print_cache_stats",
    "print_candidates_table",
    "print_info",
    "print_related_series_table",
    "print_sections_table",
    "print_series_table",
    "print_success",
    "print_warning",
]
