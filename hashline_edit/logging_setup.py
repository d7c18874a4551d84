"""Logging configuration for the hashline CLI."""
from __future__ import annotations
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "HASHLINE_LOG_LEVEL"

console = Console(stderr=True)


def _resolve_level(debug: bool) -> int:
    if debug:
        return logging.DEBUG
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    return getattr(logging, level_name, logging.WARNING)


def configure_logging(debug: bool = False) -> None:
    """Install a single Rich handler on the package logger."""
    logger = logging.getLogger("hashline_edit")
    logger.setLevel(_resolve_level(debug))
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
