"""
Logging configuration.

Configures the loguru logger for settlement services and scripts.
"""

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from settlement.config.settings import Settings


def setup_logging(settings: "Settings") -> None:
    """Configure stderr and optional file sinks."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.log_level,
            encoding="utf-8",
        )

    logger.bind(level=settings.log_level, file=settings.log_file).debug("Logging configured")
