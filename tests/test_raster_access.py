"""Tests for Pillow-backed raster access."""
import io

import numpy as np
import pytest
from PIL import Image

from maskjpg.raster_access import (
    decode,
    encode_opaque,
    image_size,
    recompress,
    resize,
    scaled_size,
)
from maskjpg.types import EncodeFailure, InvalidInput, RasterImage


class TestDecode:
    """Test cases for decode."""

    def test_rgba(self, gradient_rgba, gradient_png):
        image = decode(gradient_png)

        assert (image.width, image.height, image.channels) == (16, 8, 4)
        np.testing.assert_array_equal(image.pixels, gradient_rgba)

    def test_rgb(self, rgb_png):
        assert decode(rgb_png).channels == 3

    def test_gray(self, png_bytes):
        assert decode(png_bytes(np.zeros((3, 5), dtype=np.uint8))).channels == 1

    def test_palette_with_transparency(self):
        img = Image.new("P", (4, 4), 0)
        img.putpalette([255, 0, 0, 0, 0, 255] + [0] * 762)
        img.info["transparency"] = 0
        buffer = io.BytesIO()
        img.save(buffer, format="PNG", transparency=0)

        image = decode(buffer.getvalue())

        assert image.channels == 4
        assert np.all(image.pixels[..., 3] == 0)

    def test_garbage(self):
        with pytest.raises(InvalidInput, match="decode"):
            decode(b"not an image at all")

    def test_oversized(self, oversized_png):
        """Headers past Pillow's pixel limit are rejected as bad input."""
        with pytest.raises(InvalidInput, match="decode"):
            decode(oversized_png)


class TestResize:
    """Test cases for resize."""

    def test_scaled_size(self):
        assert scaled_size(16, 8, 4) == (4, 2)
        assert scaled_size(3, 2, 2) == (2, 1)
        assert scaled_size(100, 1, 10) == (10, 1)

    def test_downscale(self, gradient_rgba, rgba_raster):
        resized = resize(rgba_raster(gradient_rgba), 8)

        assert (resized.width, resized.height, resized.channels) == (8, 4, 4)
        assert resized.pixels.shape == (4, 8, 4)

    @pytest.mark.parametrize("width", [0, -1, 16, 64])
    def test_never_enlarges(self, gradient_rgba, width, rgba_raster):
        image = rgba_raster(gradient_rgba)

        assert resize(image, width) is image


class TestEncode:
    """Test cases for JPEG encoding and recompression."""

    def test_encode_opaque(self, red_rgba, rgba_raster):
        data = encode_opaque(rgba_raster(red_rgba), 80)

        assert data[:2] == b"\xff\xd8"
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"
            assert img.size == (4, 4)

    def test_quality_changes_size(self, rgba_raster):
        noise = np.random.default_rng(1).integers(0, 256, (32, 32, 4), dtype=np.uint8)
        noise[..., 3] = 255
        image = rgba_raster(noise)

        assert len(encode_opaque(image, 20)) < len(encode_opaque(image, 95))

    def test_encode_failure(self):
        image = RasterImage(width=1, height=1, channels=5, pixels=np.zeros((1, 1, 5), dtype=np.uint8))

        with pytest.raises(EncodeFailure):
            encode_opaque(image, 80)

    def test_recompress_keeps_dimensions(self, gradient_rgba, rgba_raster):
        data = encode_opaque(rgba_raster(gradient_rgba), 100)

        optimized = recompress(data, 60)

        assert image_size(optimized) == (16, 8)
        assert optimized[:2] == b"\xff\xd8"

    def test_recompress_failure(self):
        with pytest.raises(EncodeFailure):
            recompress(b"garbage", 80)

    def test_image_size_failure(self):
        with pytest.raises(EncodeFailure):
            image_size(b"garbage")
