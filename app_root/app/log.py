import sys

from loguru import logger

from app import settings


def configure_logging(level: str = None) -> None:
    """Replace loguru's default sink with a single stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}",
    )
