"""Logging configuration for costgate.

Logs always go to stderr: when serving, stdout carries the MCP stream.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | int = logging.WARNING, verbose: bool = False) -> logging.Logger:
    """Configure the root logger with a rich handler bound to stderr.

    Args:
        level: Level name or number used unless ``verbose`` is set.
        verbose: Force DEBUG and show source paths in log lines.

    Returns:
        The ``costgate`` package logger.
    """
    if verbose:
        level = logging.DEBUG
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)

    logger = logging.getLogger("costgate")
    logger.setLevel(level)
    return logger
