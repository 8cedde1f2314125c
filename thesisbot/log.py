"""Logging setup using Rich."""

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Route the ``thesisbot`` logger tree through a Rich handler.

    Safe to call more than once; the handler is only attached the first time.
    """
    logger = logging.getLogger("thesisbot")
    logger.setLevel(level.upper())
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
