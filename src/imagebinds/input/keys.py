"""Key identifiers shared by the key source and the hotkey engine.

KeyIds are Windows virtual-key codes. They stay stable across restarts,
which keeps persisted bindings valid.
"""

import ctypes
from typing import Dict, List

VK_LSHIFT = 0xA0
VK_RSHIFT = 0xA1
VK_LCONTROL = 0xA2
VK_RCONTROL = 0xA3

VK_A = 0x41
VK_J = 0x4A
VK_Z = 0x5A

# High bit of GetAsyncKeyState: key is down right now
KEY_DOWN_MASK = 0x8000

MODIFIER_KEY = VK_LCONTROL
TRIGGER_KEY = VK_J
SHIFT_KEYS = (VK_LSHIFT, VK_RSHIFT)

# Letters A-Z without the trigger key, lowest KeyId first
ALPHABET: List[int] = [vk for vk in range(VK_A, VK_Z + 1) if vk != TRIGGER_KEY]

MODIFIER_NAMES: Dict[int, str] = {
    VK_LSHIFT: "LShift",
    VK_RSHIFT: "RShift",
    VK_LCONTROL: "LControl",
    VK_RCONTROL: "RControl",
}


def is_letter(key_id: int) -> bool:
    return VK_A <= key_id <= VK_Z


def letter_key(char: str) -> int:
    """Return the KeyId for an ASCII letter ("a" and "A" map to the same key)."""
    if len(char) != 1 or not char.isascii() or not char.isalpha():
        raise ValueError(f"Not an ASCII letter: {char!r}")
    return ord(char.upper())


def key_name(key_id: int) -> str:
    """Human readable key name for log messages."""
    if is_letter(key_id):
        return chr(key_id)
    if key_id in MODIFIER_NAMES:
        return MODIFIER_NAMES[key_id]
    return f"0x{key_id:02X}"


def async_key_pressed(key_id: int) -> bool:
    """Ask Windows whether a key is physically held right now.

    Unlike event tracking this cannot go stale when a key-up is missed.
    """
    user32 = ctypes.windll.user32
    user32.GetAsyncKeyState.argtypes = [ctypes.c_int]
    user32.GetAsyncKeyState.restype = ctypes.c_short
    return bool(user32.GetAsyncKeyState(key_id) & KEY_DOWN_MASK)
