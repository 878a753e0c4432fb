"""Logging setup shared by the CLI and the API."""

import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route ``personashop`` loggers through a rich handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logger = logging.getLogger("personashop")
    logger.setLevel(level.upper())

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
