"""Hotkey engine - turns modifier/trigger combos into record or playback.

Hold the modifier (Left Ctrl) and press the trigger (J):
- with Shift held: the next letter pressed within the scan window gets
  the current clipboard image
- without Shift: the next bound letter pressed within the scan window
  puts its image back on the clipboard

When several candidate keys are down on the same poll, the lowest KeyId
wins.
"""

import time
from typing import Callable, Iterable, Optional, Sequence
from loguru import logger

from ..input.keys import ALPHABET, MODIFIER_KEY, SHIFT_KEYS, TRIGGER_KEY, key_name
from ..output.clipboard import ClipboardError
from ..utils.constants import POLL_INTERVAL, SCAN_TIMEOUT, ComboOutcome
from .context import AppContext


class HotkeyEngine:
    """Combo state machine driven by a key event source.

    The key source needs is_pressed(key_id) and on_key_down(key_id, handler).
    The clipboard needs read_image() and write_image(blob), raising
    ClipboardError on failure.

    Attributes:
        poll_interval: Seconds between key polls
        scan_timeout: Seconds a record/playback scan waits for a letter
    """

    def __init__(
        self,
        key_source,
        context: AppContext,
        clipboard,
        modifier_key: int = MODIFIER_KEY,
        trigger_key: int = TRIGGER_KEY,
        shift_keys: Sequence[int] = SHIFT_KEYS,
        alphabet: Sequence[int] = ALPHABET,
        poll_interval: float = POLL_INTERVAL,
        scan_timeout: float = SCAN_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.keys = key_source
        self.context = context
        self.clipboard = clipboard
        self.modifier_key = modifier_key
        self.trigger_key = trigger_key
        self.shift_keys = tuple(shift_keys)
        self.alphabet = sorted(alphabet)
        self.poll_interval = poll_interval
        self.scan_timeout = scan_timeout
        self._sleep = sleep
        self._clock = clock

    def register(self):
        """Register the engine as the modifier key-down handler."""
        self.keys.on_key_down(self.modifier_key, self.on_modifier_down)
        logger.info(
            f"Combo registered: {key_name(self.modifier_key)}+{key_name(self.trigger_key)} "
            f"(hold Shift to record)"
        )

    @property
    def is_armed(self) -> bool:
        """True while a combo is being handled."""
        return self.context.guard.active

    def on_modifier_down(self) -> str:
        """Handle one modifier key-down event.

        Returns:
            One of the ComboOutcome values
        """
        if not self.context.guard.acquire():
            # Auto-repeat or a second press while a combo is running
            return ComboOutcome.DROPPED

        try:
            if self.keys.is_pressed(self.trigger_key):
                logger.debug("Trigger already down when modifier was pressed, ignoring combo")
                return ComboOutcome.ABORTED

            while self.keys.is_pressed(self.modifier_key):
                if self.keys.is_pressed(self.trigger_key):
                    if self._shift_pressed():
                        self.record_scan()
                        return ComboOutcome.RECORD
                    self.playback_scan()
                    return ComboOutcome.PLAYBACK
                self._sleep(self.poll_interval)

            return ComboOutcome.RELEASED
        finally:
            self.context.guard.release()

    def record_scan(self) -> Optional[int]:
        """Wait for a letter and bind the clipboard image to it.

        Returns:
            The letter that was pressed, or None on timeout
        """
        logger.debug("Record: waiting for a letter")

        def attempt() -> Optional[int]:
            key = self._first_pressed(self.alphabet)
            if key is not None:
                self._capture(key)
            return key

        return self._scan(attempt)

    def playback_scan(self) -> Optional[int]:
        """Wait for a bound letter and put its image on the clipboard.

        Returns:
            The letter whose image was pasted, or None on timeout
        """
        logger.debug("Playback: waiting for a bound letter")
        store = self.context.store

        def attempt() -> Optional[int]:
            key = self._first_pressed(store.list_keys())
            if key is None:
                return None
            blob = store.playback_lookup(key)
            if blob is None:
                logger.warning(f"No image bound to {key_name(key)}, still waiting")
                return None
            self._paste(key, blob)
            return key

        return self._scan(attempt)

    def _scan(self, attempt: Callable[[], Optional[int]]) -> Optional[int]:
        """Run attempt() every poll until it returns a key or the scan times out."""
        deadline = self._clock() + self.scan_timeout
        while self._clock() < deadline:
            key = attempt()
            if key is not None:
                return key
            self._sleep(self.poll_interval)

        logger.debug(f"No key pressed within {self.scan_timeout:g}s")
        return None

    def _first_pressed(self, candidates: Iterable[int]) -> Optional[int]:
        pressed = [key for key in candidates if self.keys.is_pressed(key)]
        return min(pressed) if pressed else None

    def _shift_pressed(self) -> bool:
        return any(self.keys.is_pressed(key) for key in self.shift_keys)

    def _capture(self, key: int) -> bool:
        try:
            blob = self.clipboard.read_image()
        except ClipboardError as e:
            logger.error(f"failed to get clipboard: {e}")
            return False

        self.context.store.record(key, blob)
        if self.context.save():
            logger.info(f"image saved to {key_name(key)}")
        return True

    def _paste(self, key: int, blob: bytes) -> bool:
        try:
            self.clipboard.write_image(blob)
        except ClipboardError as e:
            logger.error(f"couldn't set clipboard for {key_name(key)}: {e}")
            return False

        logger.info(f"clipboard set to {key_name(key)} image")
        return True
