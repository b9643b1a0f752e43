"""Output module - clipboard access."""

from .clipboard import ClipboardBridge, ClipboardError

__all__ = ["ClipboardBridge", "ClipboardError"]
