"""Logging setup for hosts embedding the timer scheduler."""
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.configure(extra={"module": "ark_timers"})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
