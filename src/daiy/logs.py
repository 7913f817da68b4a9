"""Logging setup.

Log records go through the standard ``logging`` module and are rendered by
Rich. Modules obtain their logger with ``logging.getLogger(__name__)``.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import LogLevel

LOGGER_NAME = "daiy"


def setup_logging(level: str = "info", console: Console | None = None) -> logging.Logger:
    """Configure the package logger.

    Calling this more than once replaces the previous handler rather than
    stacking handlers.

    Args:
        level: Level name (debug, info, warning, error)
        console: Optional Rich console to render to (stderr by default)

    Returns:
        The configured ``daiy`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(LogLevel.from_string(level))

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
