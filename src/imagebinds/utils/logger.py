"""Logging configuration using loguru."""

import sys
from loguru import logger

from .constants import LOGS_DIR, APP_NAME


def setup_logger(debug: bool = False):
    """Configure application logging.

    Args:
        debug: Enable debug level logging
    """
    # Remove default handler
    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    level = "DEBUG" if debug else "INFO"

    # Console handler (only if stderr is available - not in windowed mode)
    if sys.stderr is not None:
        logger.add(
            sys.stderr,
            format=log_format,
            level=level,
            colorize=True,
        )

    # File handlers only when the logs directory has been created
    if LOGS_DIR.is_dir():
        base_name = APP_NAME.lower().replace(" ", "_")
        logger.add(
            LOGS_DIR / f"{base_name}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="WARNING",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )

        if debug:
            logger.add(
                LOGS_DIR / f"{base_name}_debug.log",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
                level="DEBUG",
                rotation="50 MB",
                retention="3 days",
            )

    logger.info(f"{APP_NAME} logger initialized")
    return logger


__all__ = ["logger", "setup_logger"]
