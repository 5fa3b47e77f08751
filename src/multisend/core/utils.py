"""Utility functions"""

import sys

from loguru import logger

from multisend.core.constants import LOG_PATH


def singleton(cls):
    """Singleton decorator to ensure a class has only one instance."""
    instances = {}

    def get_instance(*args, **kwargs):
        if cls not in instances:
            instances[cls] = cls(*args, **kwargs)
        return instances[cls]

    return get_instance


def configure_logger(level: str = "INFO", console: bool = False):
    """Configure the logger for the application."""
    if hasattr(configure_logger, "configured"):
        return logger

    logger.remove()

    logger.add(
        str(LOG_PATH),
        rotation="10 MB",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
    )
    if console:
        logger.add(sys.stderr, level="WARNING", format="{level: <8} | {message}")

    configure_logger.configured = True
    return logger
