import sys
from typing import Optional

from loguru import logger

from chaincfg.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route loguru output to a single stderr sink.

    Stdout stays reserved for command output.

    Args:
        level (Optional[str]): Minimum level, settings.log_level by default.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
