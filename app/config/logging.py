"""
Logging configuration.

Configures loguru sinks for every process (HTTP server, worker,
scheduler, admin scripts).
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(component: str) -> None:
    """
    Configure loguru sinks.

    Args:
        component: Process name, used for the log file name
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        f"logs/{component}.log",
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
    )
