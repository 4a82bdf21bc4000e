"""Simple message printing helpers for wikishelf UI."""

from __future__ import annotations

from rich.markup import escape

from wikishelf.ui.core import console, err_console


def print_success(message: str) -> None:
    """Print a success message with checkmark.

    Example:
        >>> print_success("Cache cleared")
          ✓ Cache cleared
    """
    console.print(f"  [success]✓[/] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"  [warning]![/] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message.

    Example:
        >>> print_info("Found 3 related series")
          → Found 3 related series
    """
    console.print(f"  [info]→[/] {escape(message)}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Print a fatal error (and optional hint) to stderr.

    Args:
        message: The error message
        hint: Optional hint for resolution

    Example:
        >>> fatal_error("No series found for 'xyz'", "Try the full series title")
    """
    err_console.print(f"\n[error]Error:[/] {escape(message)}")
    if hint:
        err_console.print(f"[dim]Hint: {escape(hint)}[/]")
