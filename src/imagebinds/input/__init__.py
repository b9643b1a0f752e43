"""Input module - global key events and key identifiers."""

from .hotkey_manager import HotkeyManager
from . import keys

__all__ = ["HotkeyManager", "keys"]
