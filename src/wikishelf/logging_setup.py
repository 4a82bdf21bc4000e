"""Logging configuration for wikishelf.

All modules log through ``logging.getLogger(__name__)``, so everything lives
under the ``wikishelf`` logger configured here. Console output goes to stderr
(stdout is reserved for tables and ``--json`` output).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "wikishelf"

FILE_FORMAT = "%(asctime)s | %(levelname)-5s | [%(name)s] %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP stack loggers; httpx logs every request at INFO and hpack is chatty at DEBUG
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "hpack", "h2")

# Global reference to console handler for level adjustment
_console_handler: logging.Handler | None = None


def _resolve_level(name: str) -> int:
    """Map a level name to its number; unknown names mean INFO."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _console_handler_for(rich_console: bool, level: int) -> logging.Handler:
    handler: logging.Handler
    if rich_console:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            # Messages contain page titles with [[...]] and [brackets]
            markup=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(level)
    return handler


def _file_handler_for(log_file: Path | str) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    rich_console: bool = True,
    quiet_console: bool = False,
) -> logging.Logger:
    """
    Configure the ``wikishelf`` logger.

    Safe to call repeatedly (the CLI calls it once per invocation); existing
    handlers are replaced.

    Args:
        log_level: Logging level name (case-insensitive; unknown names mean INFO)
        log_file: Optional file that receives DEBUG and above
        rich_console: Use rich handler for pretty console output
        quiet_console: If True, only show WARNING+ on console (tables stay readable)

    Returns:
        The package logger
    """
    global _console_handler
    level = _resolve_level(log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = _console_handler_for(rich_console, logging.WARNING if quiet_console else level)
    logger.addHandler(console_handler)
    _console_handler = console_handler

    if log_file:
        logger.addHandler(_file_handler_for(log_file))

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def set_console_quiet(quiet: bool = True) -> None:
    """
    Toggle quiet mode for console logging.

    When quiet, only WARNING and above are shown on console.
    INFO/DEBUG still go to log file if configured.

    Args:
        quiet: If True, suppress INFO-level console output
    """
    if _console_handler is not None:
        _console_handler.setLevel(logging.WARNING if quiet else logging.INFO)
