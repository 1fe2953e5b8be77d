"""Logging setup for custos.

Modules log through ``logging.getLogger(__name__)``; this module attaches
a single rich handler to the ``custos`` logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "custos"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure the custos logger.

    Calling it again only changes the level.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR).

    Returns:
        The configured "custos" logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
