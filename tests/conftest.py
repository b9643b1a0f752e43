"""pytest configuration and shared fixtures"""
import pytest

from imagebinds.core.binding_store import BindingStore
from imagebinds.core.context import AppContext
from imagebinds.core.hotkey_engine import HotkeyEngine
from imagebinds.data.persistence import BindingPersistence
from imagebinds.output.clipboard import ClipboardError

BMP_BYTES = b"BM" + bytes(range(60))


class FakeClock:
    """Manual clock; sleeping advances time and fires scheduled events."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = 0
        self._events = []

    def __call__(self):
        return self.now

    def at(self, when, action):
        self._events.append((when, action))
        self._events.sort(key=lambda event: event[0])

    def sleep(self, seconds):
        self.sleeps += 1
        self.now += seconds
        while self._events and self._events[0][0] <= self.now + 1e-9:
            _, action = self._events.pop(0)
            action()


class FakeKeySource:
    """Key source whose pressed keys are scripted against a FakeClock."""

    def __init__(self, clock):
        self.clock = clock
        self.pressed = set()
        self.handlers = {}

    def is_pressed(self, key_id):
        return key_id in self.pressed

    def on_key_down(self, key_id, handler):
        self.handlers.setdefault(key_id, []).append(handler)

    def press(self, *key_ids):
        self.pressed.update(key_ids)

    def release(self, *key_ids):
        self.pressed.difference_update(key_ids)

    def press_at(self, when, *key_ids):
        self.clock.at(when, lambda: self.press(*key_ids))

    def release_at(self, when, *key_ids):
        self.clock.at(when, lambda: self.release(*key_ids))


class FakeClipboard:
    """Clipboard holding one image; records every write."""

    def __init__(self, image=BMP_BYTES):
        self.image = image
        self.read_error = None
        self.write_error = None
        self.reads = 0
        self.written = []

    def read_image(self):
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        if self.image is None:
            raise ClipboardError("clipboard does not contain an image")
        return self.image

    def write_image(self, blob):
        if self.write_error is not None:
            raise self.write_error
        self.written.append(blob)
        self.image = blob


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def keys(clock):
    return FakeKeySource(clock)


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.bin"


@pytest.fixture
def persistence(data_file):
    return BindingPersistence(data_file)


@pytest.fixture
def context(persistence):
    return AppContext(BindingStore(), persistence)


@pytest.fixture
def engine(keys, context, clipboard, clock):
    return HotkeyEngine(
        key_source=keys,
        context=context,
        clipboard=clipboard,
        sleep=clock.sleep,
        clock=clock,
    )
