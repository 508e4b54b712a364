"""
Logging setup
stderr sink for humans, optional rotating file sink for the record
"""

import sys
from typing import Optional
from loguru import logger


def configure_logging(log_file: Optional[str] = None, level: str = "INFO"):
    """
    Configure loguru sinks

    Log output goes to stderr only; stdout is reserved for the
    deployment result line.

    Args:
        log_file: Optional file path for a DEBUG-level log
        level: stderr log level
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level
    )

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )
