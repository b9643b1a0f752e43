"""Data module - configuration and binding persistence."""

from .config_manager import ConfigManager
from .persistence import (
    BindingPersistence,
    PersistenceError,
    PersistenceLoadError,
    PersistenceSaveError,
)

__all__ = [
    "ConfigManager",
    "BindingPersistence",
    "PersistenceError",
    "PersistenceLoadError",
    "PersistenceSaveError",
]
