"""Loguru sink configuration shared by the web server and scripts."""
import sys
from typing import Optional

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the application sinks.

    Args:
        level: Minimum level for every sink.
        log_file: Optional path of a rotating log file.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            rotation="10 MB",
            retention="14 days",
            encoding="utf-8",
        )
