"""Clipboard module - read and write clipboard images as BMP bytes."""

import ctypes
import io
import struct
import sys
import threading
from loguru import logger
from PIL import Image, ImageGrab

CF_DIB = 8
GMEM_MOVEABLE = 0x0002
GMEM_ZEROINIT = 0x0040

# BITMAPFILEHEADER precedes the DIB in a .bmp file
BMP_FILE_HEADER_SIZE = 14
BITMAPINFOHEADER_SIZE = 40
BI_BITFIELDS = 3
BI_ALPHABITFIELDS = 6

# Modes Pillow can write to BMP without conversion
BMP_MODES = ("1", "L", "P", "RGB", "RGBA")


class ClipboardError(Exception):
    """Raised when the clipboard cannot be read or written."""


def image_to_bmp(img: Image.Image) -> bytes:
    """Encode a Pillow image as a complete BMP file."""
    if img.mode not in BMP_MODES:
        img = img.convert("RGBA")
    buf = io.BytesIO()
    img.save(buf, format="BMP")
    return buf.getvalue()


def bmp_to_dib(blob: bytes) -> bytes:
    """Strip the BMP file header, leaving the DIB the clipboard expects.

    Raises:
        ClipboardError: If the blob is not a BMP file
    """
    if len(blob) <= BMP_FILE_HEADER_SIZE or blob[:2] != b"BM":
        raise ClipboardError(f"Not a BMP image ({len(blob)} bytes)")
    return blob[BMP_FILE_HEADER_SIZE:]


def dib_to_bmp(dib: bytes) -> bytes:
    """Prepend a BITMAPFILEHEADER to a clipboard DIB, leaving the DIB untouched.

    Raises:
        ClipboardError: If the DIB header is missing or unsupported
    """
    if len(dib) < BITMAPINFOHEADER_SIZE:
        raise ClipboardError(f"DIB too short ({len(dib)} bytes)")

    header_size, = struct.unpack_from("<I", dib, 0)
    bit_count, compression = struct.unpack_from("<HI", dib, 14)
    colors_used, = struct.unpack_from("<I", dib, 32)
    if header_size < BITMAPINFOHEADER_SIZE or header_size > len(dib):
        raise ClipboardError(f"Unsupported DIB header size {header_size}")

    # Plain BITMAPINFOHEADER keeps its channel masks after the header
    masks = 0
    if header_size == BITMAPINFOHEADER_SIZE:
        if compression == BI_BITFIELDS:
            masks = 12
        elif compression == BI_ALPHABITFIELDS:
            masks = 16

    if not colors_used and bit_count <= 8:
        colors_used = 1 << bit_count

    pixel_offset = BMP_FILE_HEADER_SIZE + header_size + masks + colors_used * 4
    file_header = struct.pack(
        "<2sIHHI", b"BM", BMP_FILE_HEADER_SIZE + len(dib), 0, 0, pixel_offset
    )
    return file_header + dib


class ClipboardBridge:
    """Exchange images with the system clipboard.

    Images travel as complete BMP files. On Windows the clipboard CF_DIB
    is read and written byte for byte; elsewhere reading falls back to
    Pillow's ImageGrab, which re-encodes the image.
    """

    def __init__(self):
        """Initialize the clipboard bridge."""
        self._lock = threading.Lock()
        logger.info("ClipboardBridge initialized")

    def read_image(self) -> bytes:
        """Grab the current clipboard image.

        Returns:
            BMP file bytes

        Raises:
            ClipboardError: If the clipboard holds no image or cannot be read
        """
        with self._lock:
            if sys.platform == "win32":
                return dib_to_bmp(self._get_dib())

            try:
                content = ImageGrab.grabclipboard()
            except Exception as e:
                raise ClipboardError(f"grab failed: {e}") from e

        if not isinstance(content, Image.Image):
            raise ClipboardError("clipboard does not contain an image")

        try:
            return image_to_bmp(content)
        except Exception as e:
            raise ClipboardError(f"could not encode image: {e}") from e

    def write_image(self, blob: bytes):
        """Put a BMP image on the clipboard.

        Args:
            blob: BMP file bytes, as returned by read_image()

        Raises:
            ClipboardError: If the image cannot be placed on the clipboard
        """
        dib = bmp_to_dib(blob)

        if sys.platform != "win32":
            raise ClipboardError(f"image clipboard writes are not supported on {sys.platform}")

        with self._lock:
            self._set_dib(dib)

    def _get_dib(self) -> bytes:
        """Copy the raw CF_DIB out of the Windows clipboard."""
        from ctypes import wintypes

        user32 = ctypes.windll.user32
        kernel32 = ctypes.windll.kernel32
        user32.OpenClipboard.argtypes = [wintypes.HWND]
        user32.OpenClipboard.restype = wintypes.BOOL
        user32.IsClipboardFormatAvailable.argtypes = [wintypes.UINT]
        user32.IsClipboardFormatAvailable.restype = wintypes.BOOL
        user32.GetClipboardData.argtypes = [wintypes.UINT]
        user32.GetClipboardData.restype = wintypes.HANDLE
        kernel32.GlobalLock.argtypes = [wintypes.HGLOBAL]
        kernel32.GlobalLock.restype = ctypes.c_void_p
        kernel32.GlobalUnlock.argtypes = [wintypes.HGLOBAL]
        kernel32.GlobalSize.argtypes = [wintypes.HGLOBAL]
        kernel32.GlobalSize.restype = ctypes.c_size_t

        if not user32.OpenClipboard(None):
            raise ClipboardError("failed to open clipboard")
        try:
            if not user32.IsClipboardFormatAvailable(CF_DIB):
                raise ClipboardError("clipboard does not contain an image")

            handle = user32.GetClipboardData(CF_DIB)
            if not handle:
                raise ClipboardError("GetClipboardData failed")

            ptr = kernel32.GlobalLock(handle)
            if not ptr:
                raise ClipboardError("GlobalLock failed")
            try:
                size = kernel32.GlobalSize(handle)
                return ctypes.string_at(ptr, size)
            finally:
                kernel32.GlobalUnlock(handle)
        finally:
            user32.CloseClipboard()

    def _set_dib(self, dib: bytes):
        """Copy a DIB into global memory and hand it to the clipboard."""
        from ctypes import wintypes

        user32 = ctypes.windll.user32
        kernel32 = ctypes.windll.kernel32
        kernel32.GlobalAlloc.argtypes = [wintypes.UINT, ctypes.c_size_t]
        kernel32.GlobalAlloc.restype = wintypes.HGLOBAL
        kernel32.GlobalLock.argtypes = [wintypes.HGLOBAL]
        kernel32.GlobalLock.restype = ctypes.c_void_p
        kernel32.GlobalUnlock.argtypes = [wintypes.HGLOBAL]
        kernel32.GlobalFree.argtypes = [wintypes.HGLOBAL]
        user32.SetClipboardData.argtypes = [wintypes.UINT, wintypes.HANDLE]
        user32.SetClipboardData.restype = wintypes.HANDLE

        hmem = kernel32.GlobalAlloc(GMEM_MOVEABLE | GMEM_ZEROINIT, len(dib))
        if not hmem:
            raise ClipboardError("GlobalAlloc failed")

        ptr = kernel32.GlobalLock(hmem)
        if not ptr:
            kernel32.GlobalFree(hmem)
            raise ClipboardError("GlobalLock failed")
        ctypes.memmove(ptr, dib, len(dib))
        kernel32.GlobalUnlock(hmem)

        if not user32.OpenClipboard(None):
            kernel32.GlobalFree(hmem)
            raise ClipboardError("failed to open clipboard")
        try:
            user32.EmptyClipboard()
            if not user32.SetClipboardData(CF_DIB, hmem):
                # Ownership only passes to the clipboard on success
                kernel32.GlobalFree(hmem)
                raise ClipboardError("SetClipboardData failed")
        finally:
            user32.CloseClipboard()
