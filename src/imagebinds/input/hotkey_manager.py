"""Hotkey manager module - global key events and key state using pynput."""

import sys
import threading
from typing import Callable, Dict, List, Optional, Set
from loguru import logger

from .keys import (
    VK_LCONTROL,
    VK_LSHIFT,
    VK_RCONTROL,
    VK_RSHIFT,
    async_key_pressed,
    is_letter,
    key_name,
    letter_key,
)

try:
    from pynput import keyboard
    from pynput.keyboard import Key, KeyCode
    PYNPUT_AVAILABLE = True
except ImportError:
    PYNPUT_AVAILABLE = False
    logger.warning("pynput not installed. Install with: pip install pynput")


class HotkeyManager:
    """Global key event source using pynput.

    Tracks which keys are currently held and calls registered handlers
    when a key goes down. Each handler runs on its own daemon thread so a
    blocking handler never stalls the listener, and key state keeps
    updating while the handler polls it.

    Example:
        manager = HotkeyManager()
        manager.on_key_down(VK_LCONTROL, my_callback)
        manager.start()
        manager.run_event_loop()
    """

    def __init__(self, threaded_dispatch: bool = True):
        """Initialize the hotkey manager.

        Args:
            threaded_dispatch: Run each handler on a new daemon thread
        """
        if not PYNPUT_AVAILABLE:
            raise RuntimeError("pynput not available")

        self._handlers: Dict[int, List[Callable]] = {}
        self._pressed: Set[int] = set()
        self._listener: Optional[keyboard.Listener] = None
        self._is_running = False
        self._threaded_dispatch = threaded_dispatch
        self._lock = threading.Lock()

        # Left/right aliases collapse where pynput reports the generic key
        self._special_keys: Dict = {
            Key.ctrl: VK_LCONTROL,
            Key.ctrl_l: VK_LCONTROL,
            Key.ctrl_r: VK_RCONTROL,
            Key.shift: VK_LSHIFT,
            Key.shift_l: VK_LSHIFT,
            Key.shift_r: VK_RSHIFT,
        }

        logger.info("HotkeyManager initialized")

    def key_id(self, key) -> Optional[int]:
        """Normalize a pynput key to a KeyId.

        Returns:
            KeyId, or None for keys this application does not track
        """
        if isinstance(key, Key):
            return self._special_keys.get(key)
        if isinstance(key, KeyCode):
            # Windows reports control characters for Ctrl+letter, the vk is reliable
            if sys.platform == "win32" and key.vk is not None and is_letter(key.vk):
                return key.vk
            char = key.char
            if char and len(char) == 1 and char.isascii() and char.isalpha():
                return letter_key(char)
        return None

    def on_key_down(self, key_id: int, handler: Callable[[], object]):
        """Register a handler for key-down events of one key.

        Auto-repeat produces repeated key-down events while a key is held;
        every one of them is dispatched.

        Args:
            key_id: KeyId to watch
            handler: Callable taking no arguments
        """
        with self._lock:
            self._handlers.setdefault(key_id, []).append(handler)

        logger.info(f"Registered key-down handler for {key_name(key_id)}")

    def is_pressed(self, key_id: int) -> bool:
        """Check whether a key is currently held down.

        On Windows the OS key state answers, so a missed key-up cannot
        leave a key stuck. Elsewhere press and release events answer.
        """
        if sys.platform == "win32":
            return async_key_pressed(key_id)
        with self._lock:
            return key_id in self._pressed

    def key_down(self, key_id: int):
        """Record a key-down transition and dispatch its handlers."""
        with self._lock:
            self._pressed.add(key_id)
            handlers = list(self._handlers.get(key_id, ()))

        for handler in handlers:
            if self._threaded_dispatch:
                threading.Thread(
                    target=self._dispatch,
                    args=(handler, key_id),
                    daemon=True,
                    name=f"KeyDown-{key_name(key_id)}",
                ).start()
            else:
                self._dispatch(handler, key_id)

    def key_up(self, key_id: int):
        """Record a key-up transition."""
        with self._lock:
            self._pressed.discard(key_id)

    def _dispatch(self, handler: Callable, key_id: int):
        try:
            handler()
        except Exception as e:
            logger.error(f"Key-down handler error for {key_name(key_id)}: {e}")

    def _on_press(self, key):
        """Handle key press event."""
        key_id = self.key_id(key)
        if key_id is not None:
            self.key_down(key_id)

    def _on_release(self, key):
        """Handle key release event."""
        key_id = self.key_id(key)
        if key_id is not None:
            self.key_up(key_id)

    def start(self):
        """Start listening for key events."""
        if self._is_running:
            logger.warning("HotkeyManager already running")
            return

        self._listener = keyboard.Listener(
            on_press=self._on_press,
            on_release=self._on_release,
        )
        self._listener.start()
        self._is_running = True
        logger.info("HotkeyManager started")

    def run_event_loop(self):
        """Block the calling thread until the listener stops."""
        if not self._is_running:
            self.start()

        # Short joins keep Ctrl+C responsive on the main thread
        while self._listener is not None and self._listener.is_alive():
            self._listener.join(0.5)

    def stop(self):
        """Stop listening for key events."""
        if not self._is_running:
            return

        if self._listener:
            self._listener.stop()
            self._listener = None

        self._is_running = False
        with self._lock:
            self._pressed.clear()
        logger.info("HotkeyManager stopped")

    @property
    def is_running(self) -> bool:
        """Check if manager is running."""
        return self._is_running
