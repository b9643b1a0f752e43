"""Persistence module - binding store file on disk.

File layout (little-endian, the same bytes bincode produces for a map of
u64 keys to byte vectors):

    u64 entry count
    per entry: u64 key, u64 blob length, blob bytes
"""

import struct
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional
from loguru import logger

from ..core.binding_store import BindingStore
from ..utils.constants import DATA_FILE

_U64 = struct.Struct("<Q")
_U64_MAX = 2 ** 64 - 1


class PersistenceError(Exception):
    """Base class for binding file errors."""


class PersistenceLoadError(PersistenceError):
    """Raised when the binding file cannot be read or decoded."""


class PersistenceSaveError(PersistenceError):
    """Raised when the binding file cannot be encoded or written."""


def encode_bindings(bindings: Mapping[int, bytes]) -> bytes:
    """Serialize a key to image mapping.

    Raises:
        PersistenceSaveError: If a key does not fit in an unsigned 64-bit integer
    """
    parts = [_U64.pack(len(bindings))]
    for key in sorted(bindings):
        if not 0 <= key <= _U64_MAX:
            raise PersistenceSaveError(f"Key out of range: {key}")
        blob = bindings[key]
        parts.append(_U64.pack(key))
        parts.append(_U64.pack(len(blob)))
        parts.append(bytes(blob))
    return b"".join(parts)


def decode_bindings(data: bytes) -> Dict[int, bytes]:
    """Deserialize a key to image mapping.

    Raises:
        PersistenceLoadError: If the data is truncated or repeats a key

    Bytes after the last entry are ignored, as bincode readers do.
    """
    view = memoryview(data)
    offset = 0

    def read_u64() -> int:
        nonlocal offset
        if offset + _U64.size > len(view):
            raise PersistenceLoadError(f"Unexpected end of data at byte {offset}")
        (value,) = _U64.unpack_from(view, offset)
        offset += _U64.size
        return value

    count = read_u64()
    bindings: Dict[int, bytes] = {}
    for _ in range(count):
        key = read_u64()
        length = read_u64()
        if offset + length > len(view):
            raise PersistenceLoadError(
                f"Image for key {key} truncated: need {length} bytes, have {len(view) - offset}"
            )
        if key in bindings:
            raise PersistenceLoadError(f"Duplicate key {key}")
        bindings[key] = bytes(view[offset:offset + length])
        offset += length

    if offset != len(view):
        logger.debug(f"Ignoring {len(view) - offset} trailing bytes after {count} entries")

    return bindings


class BindingPersistence:
    """Loads and saves the binding store to a single file.

    Saves truncate and rewrite the whole file.

    Attributes:
        data_file: Path to the binding file
    """

    def __init__(self, data_file: Optional[Path] = None):
        """Initialize persistence.

        Args:
            data_file: Path to the binding file (uses default if None)
        """
        self.data_file = Path(data_file) if data_file else DATA_FILE
        self._lock = threading.Lock()

    def read(self) -> Dict[int, bytes]:
        """Read and decode the binding file.

        Raises:
            PersistenceLoadError: If the file is missing or undecodable
        """
        try:
            data = self.data_file.read_bytes()
        except OSError as e:
            raise PersistenceLoadError(str(e)) from e
        return decode_bindings(data)

    def load(self) -> BindingStore:
        """Load the binding store, falling back to an empty one.

        Returns:
            Loaded store, or an empty store if the file could not be read
        """
        try:
            bindings = self.read()
        except PersistenceLoadError as e:
            logger.warning(f"couldn't load binds from {self.data_file}: {e}")
            return BindingStore()

        logger.info(f"loaded {len(bindings)} binds from {self.data_file}")
        return BindingStore(bindings)

    def write(self, bindings: Mapping[int, bytes]):
        """Encode and write the binding file.

        Raises:
            PersistenceSaveError: If encoding or writing fails
        """
        data = encode_bindings(bindings)
        with self._lock:
            try:
                self.data_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.data_file, "wb") as f:
                    f.write(data)
            except OSError as e:
                raise PersistenceSaveError(str(e)) from e

    def save(self, store: BindingStore) -> bool:
        """Save the whole binding store.

        Returns:
            True if saved successfully
        """
        try:
            self.write(store.snapshot())
        except PersistenceSaveError as e:
            logger.error(f"couldn't save binds: {e}")
            return False

        logger.debug(f"Saved {len(store)} binds to {self.data_file}")
        return True
