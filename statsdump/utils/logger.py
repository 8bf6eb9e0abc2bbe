"""Diagnostic logging - everything goes to stderr, stdout carries CSV only."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "statsdump"


def setup_logging(level: Union[int, str] = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """Configure the statsdump logger tree.

    Args:
        level: Log level name or number.
        console: Console to render to. Defaults to a stderr console.

    Returns:
        The package root logger.
    """
    if isinstance(level, str):
        level = int(level) if level.isdigit() else level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Replace handlers so repeated calls (tests, re-configuration) don't stack
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
