"""Application context - shared state handed to the hotkey engine."""

import threading
from typing import Optional
from loguru import logger

from .binding_store import BindingStore


class ReentrancyGuard:
    """Process-wide flag that lets only one combo run at a time."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active = False

    def acquire(self) -> bool:
        """Switch the flag from False to True.

        Returns:
            False if another combo already holds the guard
        """
        with self._lock:
            if self._active:
                return False
            self._active = True
            return True

    def release(self):
        with self._lock:
            self._active = False

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active


class AppContext:
    """Binding store, its persistence and the combo guard.

    Built once at startup and shared with the engine and callbacks.

    Attributes:
        store: Key to image bindings
        persistence: Writes the store to disk
        guard: Serializes combo activations
    """

    def __init__(self, store: BindingStore, persistence, guard: Optional[ReentrancyGuard] = None):
        """Initialize the context.

        Args:
            store: Binding store
            persistence: BindingPersistence used by save()
            guard: Reentrancy guard (a fresh one if None)
        """
        self.store = store
        self.persistence = persistence
        self.guard = guard or ReentrancyGuard()
        self._is_shut_down = False

    @classmethod
    def load(cls, persistence) -> "AppContext":
        """Build a context from the persisted store (empty if loading fails)."""
        return cls(persistence.load(), persistence)

    def save(self) -> bool:
        """Write the whole store to disk.

        Returns:
            True if saved successfully
        """
        return self.persistence.save(self.store)

    def shutdown(self) -> bool:
        """Final save before exit. Later calls do nothing.

        Returns:
            True if the final save succeeded (or already happened)
        """
        if self._is_shut_down:
            return True
        self._is_shut_down = True

        saved = self.save()
        logger.info(f"Context shut down with {len(self.store)} binds")
        return saved
