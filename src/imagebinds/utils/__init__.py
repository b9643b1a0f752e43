"""Utilities module - constants and logging."""

from .logger import setup_logger, logger

__all__ = ["setup_logger", "logger"]
