"""Binding store - the key to image mapping."""

import threading
from typing import Dict, List, Mapping, Optional
from loguru import logger

from ..input.keys import key_name


class BindingStore:
    """Thread-safe mapping from KeyId to image bytes.

    Every access, read or write, takes the same lock. Values are returned
    as immutable bytes, so callers can use them after the lock is released.
    """

    def __init__(self, bindings: Optional[Mapping[int, bytes]] = None):
        """Initialize the store.

        Args:
            bindings: Initial key to image mapping (copied)
        """
        self._bindings: Dict[int, bytes] = {}
        self._lock = threading.Lock()

        if bindings:
            for key, blob in bindings.items():
                self._bindings[int(key)] = bytes(blob)

    def record(self, key: int, blob: bytes):
        """Bind an image to a key, replacing any previous image."""
        with self._lock:
            replaced = key in self._bindings
            self._bindings[key] = bytes(blob)

        logger.debug(
            f"{'Replaced' if replaced else 'Added'} binding for {key_name(key)} ({len(blob)} bytes)"
        )

    def playback_lookup(self, key: int) -> Optional[bytes]:
        """Get the image bound to a key.

        Returns:
            Image bytes, or None if the key is not bound. An empty image is
            returned as b"", not None.
        """
        with self._lock:
            return self._bindings.get(key)

    def list_keys(self) -> List[int]:
        """Snapshot of the bound keys, lowest KeyId first."""
        with self._lock:
            return sorted(self._bindings)

    def snapshot(self) -> Dict[int, bytes]:
        """Copy of the whole mapping, taken under the lock."""
        with self._lock:
            return dict(self._bindings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._bindings
