"""Raster decode, resize and JPEG encode through Pillow."""
import io
import logging
from typing import Callable, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from maskjpg.types import EncodeFailure, InvalidInput, RasterImage

logger = logging.getLogger(__name__)

# (jpeg bytes, quality) -> jpeg bytes
Recompressor = Callable[[bytes, int], bytes]

# DecompressionBombError derives from Exception, not OSError
DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError)


def decode(data: bytes) -> RasterImage:
    """
    Decode encoded image bytes into a raw raster.

    RGBA, RGB, LA and L pass through. Palette images are expanded to RGBA
    when they carry a transparency entry and to RGB otherwise. Other modes
    with an alpha band become RGBA, the rest RGB, so the alpha check
    downstream sees what the file actually carries.

    Raises:
        InvalidInput: If the bytes cannot be decoded
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode in ("RGBA", "RGB", "LA", "L"):
                pass
            elif img.mode == "P":
                img = img.convert("RGBA" if "transparency" in img.info else "RGB")
            elif "A" in img.getbands() or "a" in img.getbands():
                img = img.convert("RGBA")
            else:
                img = img.convert("RGB")

            pixels = np.array(img, dtype=np.uint8)
    except DECODE_ERRORS as e:
        raise InvalidInput(f"Failed to decode image: {e}") from e

    if pixels.ndim == 2:
        pixels = pixels[..., np.newaxis]

    height, width, channels = pixels.shape
    logger.debug(f"Decoded {width}x{height} image with {channels} channels")

    return RasterImage(width=width, height=height, channels=channels, pixels=pixels)


def to_pil(image: RasterImage) -> Image.Image:
    """Wrap a raster as a PIL image."""
    if image.channels not in (1, 2, 3, 4):
        raise InvalidInput(f"Cannot convert {image.channels}-channel raster")
    pixels = image.pixels
    if image.channels == 1:
        pixels = pixels[..., 0]
    # Mode follows from the array shape: L, LA, RGB or RGBA
    return Image.fromarray(np.ascontiguousarray(pixels))


def scaled_size(width: int, height: int, target_width: int) -> Tuple[int, int]:
    """Size after scaling width to target_width, keeping the aspect ratio."""
    target_height = int(height * target_width / width + 0.5)
    return target_width, max(1, target_height)


def resize(image: RasterImage, target_width: int) -> RasterImage:
    """
    Scale a raster down to target_width.

    Never enlarges: a target at or above the current width returns the
    raster unchanged.
    """
    if target_width <= 0 or target_width >= image.width:
        return image

    size = scaled_size(image.width, image.height, target_width)
    resized = to_pil(image).resize(size, Image.Resampling.LANCZOS)
    pixels = np.array(resized, dtype=np.uint8).reshape(size[1], size[0], image.channels)

    logger.debug(f"Resized {image.width}x{image.height} -> {size[0]}x{size[1]}")

    return RasterImage(width=size[0], height=size[1], channels=image.channels, pixels=pixels)


def encode_opaque(image: RasterImage, quality: int) -> bytes:
    """
    Encode a raster as JPEG, dropping the alpha band.

    Raises:
        EncodeFailure: If Pillow cannot encode the raster
    """
    buffer = io.BytesIO()
    try:
        to_pil(image).convert("RGB").save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError, InvalidInput) as e:
        raise EncodeFailure(f"JPEG encoding failed: {e}") from e

    data = buffer.getvalue()
    logger.debug(f"Encoded {image.width}x{image.height} JPEG at quality {quality}: {len(data):,} bytes")
    return data


def recompress(data: bytes, quality: int) -> bytes:
    """
    Re-encode a JPEG with Huffman optimization and progressive scans.

    Dimensions are kept as they are.

    Raises:
        EncodeFailure: If the bytes cannot be decoded or re-encoded
    """
    buffer = io.BytesIO()
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.convert("RGB").save(
                buffer,
                format="JPEG",
                quality=quality,
                optimize=True,
                progressive=True
            )
    except DECODE_ERRORS as e:
        raise EncodeFailure(f"JPEG recompression failed: {e}") from e

    optimized = buffer.getvalue()
    logger.debug(f"Recompressed JPEG: {len(data):,} -> {len(optimized):,} bytes")
    return optimized


def image_size(data: bytes) -> Tuple[int, int]:
    """(width, height) of encoded image bytes, read from the header."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except DECODE_ERRORS as e:
        raise EncodeFailure(f"Encoded image is unreadable: {e}") from e
