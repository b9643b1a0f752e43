"""Core module - binding store, application context and hotkey engine."""

from .binding_store import BindingStore
from .context import AppContext, ReentrancyGuard
from .hotkey_engine import HotkeyEngine

__all__ = ["BindingStore", "AppContext", "ReentrancyGuard", "HotkeyEngine"]
