"""Logging setup for drivesweep."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "drivesweep"


def setup_logging(level: str | int = "WARNING") -> logging.Logger:
    """
    Attach a rich handler to the package logger.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        level: Logging level name or number

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
