"""Pytest configuration and fixtures."""
import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from maskjpg.types import RasterImage


def _rgba_raster(pixels) -> RasterImage:
    array = np.asarray(pixels, dtype=np.uint8)
    height, width, channels = array.shape
    return RasterImage(width=width, height=height, channels=channels, pixels=array)


def _png_bytes(array: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(np.asarray(array, dtype=np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))


@pytest.fixture
def rgba_raster():
    """Wrap a (H, W, 4) array-like as a RasterImage."""
    return _rgba_raster


@pytest.fixture
def png_bytes():
    """Encode a uint8 array as PNG."""
    return _png_bytes


@pytest.fixture
def oversized_png():
    """PNG header claiming a 20000x20000 RGBA image, well past Pillow's pixel limit."""
    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", header) + _png_chunk(b"IEND", b"")


@pytest.fixture
def red_rgba():
    """4x4 fully opaque red RGBA pixels."""
    image = np.zeros((4, 4, 4), dtype=np.uint8)
    image[..., 0] = 255
    image[..., 3] = 255
    return image


@pytest.fixture
def checker_rgba():
    """2x2 white pixels alternating between alpha 0 and 255."""
    image = np.full((2, 2, 4), 255, dtype=np.uint8)
    image[0, 0, 3] = 0
    image[1, 1, 3] = 0
    return image


@pytest.fixture
def gradient_rgba():
    """16x8 image with a horizontal alpha ramp over a colored background."""
    image = np.zeros((8, 16, 4), dtype=np.uint8)
    image[..., 0] = 200
    image[..., 1] = 100
    image[..., 2] = 50
    image[..., 3] = np.linspace(0, 255, 16).astype(np.uint8)[np.newaxis, :]
    return image


@pytest.fixture
def red_png(red_rgba):
    return _png_bytes(red_rgba)


@pytest.fixture
def gradient_png(gradient_rgba):
    return _png_bytes(gradient_rgba)


@pytest.fixture
def rgb_png():
    """PNG without an alpha channel."""
    return _png_bytes(np.full((4, 4, 3), 128, dtype=np.uint8))


@pytest.fixture
def png_file(tmp_path, gradient_png):
    """Path to an RGBA PNG on disk."""
    path = tmp_path / "alpha.png"
    path.write_bytes(gradient_png)
    return path
