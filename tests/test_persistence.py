"""BindingPersistence tests

Covers the on-disk layout, round trips and recovery from bad files.
"""

import struct

import pytest

from imagebinds.core.binding_store import BindingStore
from imagebinds.data.persistence import (
    BindingPersistence,
    PersistenceLoadError,
    PersistenceSaveError,
    decode_bindings,
    encode_bindings,
)
from imagebinds.input.keys import letter_key

A = letter_key("a")
B = letter_key("b")


class TestEncoding:
    """Binary layout of the binding file"""

    def test_empty_map_layout(self):
        """Test an empty map is a single zero count"""
        assert encode_bindings({}) == b"\x00" * 8

    def test_entry_layout(self):
        """Test count, key, length and bytes are little-endian u64s"""
        data = encode_bindings({A: b"\x42\x4d"})
        assert data == struct.pack("<QQQ", 1, A, 2) + b"\x42\x4d"

    def test_decode_rejects_truncated_blob(self):
        """Test a blob shorter than its length prefix is an error"""
        data = struct.pack("<QQQ", 1, A, 10) + b"abc"
        with pytest.raises(PersistenceLoadError):
            decode_bindings(data)

    def test_decode_rejects_truncated_header(self):
        """Test data too short for the count is an error"""
        with pytest.raises(PersistenceLoadError):
            decode_bindings(b"\x01\x00")

    def test_decode_ignores_trailing_bytes(self):
        """Test bytes after the last entry are skipped"""
        assert decode_bindings(encode_bindings({A: b"x"}) + b"junk") == {A: b"x"}
        assert decode_bindings(encode_bindings({}) + b"\x00" * 8) == {}

    def test_decode_rejects_duplicate_keys(self):
        """Test a key may appear only once"""
        entry = struct.pack("<QQ", A, 1) + b"x"
        with pytest.raises(PersistenceLoadError):
            decode_bindings(struct.pack("<Q", 2) + entry + entry)

    def test_encode_rejects_out_of_range_key(self):
        """Test keys must fit in an unsigned 64-bit integer"""
        with pytest.raises(PersistenceSaveError):
            encode_bindings({-1: b"x"})
        with pytest.raises(PersistenceSaveError):
            encode_bindings({2 ** 64: b"x"})


class TestRoundTrip:
    """load(save(store)) gives back the same store"""

    @pytest.mark.parametrize(
        "bindings",
        [
            {},
            {A: b""},
            {A: b"BM" + bytes(range(256)), B: b"", 2 ** 64 - 1: b"\x00"},
        ],
    )
    def test_round_trip(self, persistence, bindings):
        """Test saved stores load back unchanged"""
        assert persistence.save(BindingStore(bindings))
        assert persistence.load().snapshot() == bindings

    def test_save_truncates_previous_contents(self, persistence, data_file):
        """Test a smaller store fully replaces a larger file"""
        persistence.save(BindingStore({A: b"x" * 1000, B: b"y" * 1000}))
        persistence.save(BindingStore({A: b"z"}))
        assert data_file.stat().st_size == 8 * 3 + 1
        assert persistence.read() == {A: b"z"}

    def test_save_creates_parent_directory(self, tmp_path):
        """Test saving into a missing directory creates it"""
        persistence = BindingPersistence(tmp_path / "nested" / "data.bin")
        assert persistence.save(BindingStore({A: b"a"}))
        assert persistence.read() == {A: b"a"}


class TestFailures:
    """Load and save failures are reported, never fatal"""

    def test_missing_file_loads_empty(self, persistence):
        """Test a missing file gives an empty store"""
        store = persistence.load()
        assert len(store) == 0

    def test_missing_file_read_raises(self, persistence):
        """Test the strict reader reports a missing file"""
        with pytest.raises(PersistenceLoadError):
            persistence.read()

    def test_corrupt_file_loads_empty(self, persistence, data_file):
        """Test undecodable contents give an empty store"""
        data_file.write_bytes(b"\xff" * 20)
        assert len(persistence.load()) == 0

    def test_save_failure_returns_false(self, tmp_path):
        """Test writing to a directory path fails softly"""
        persistence = BindingPersistence(tmp_path)
        store = BindingStore({A: b"a"})

        assert persistence.save(store) is False
        assert store.playback_lookup(A) == b"a"

    def test_write_failure_raises(self, tmp_path):
        """Test the strict writer reports the failure"""
        with pytest.raises(PersistenceSaveError):
            BindingPersistence(tmp_path).write({A: b"a"})

    def test_default_path(self):
        """Test the default file is data.bin in the working directory"""
        assert str(BindingPersistence().data_file) == "data.bin"
