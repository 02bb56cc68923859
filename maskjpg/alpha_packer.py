"""Pack color and alpha of an RGBA raster into one double-height opaque raster."""
import logging

import numpy as np

from maskjpg.types import InvalidInput, PackedRaster, RasterImage, UnsupportedFormat

logger = logging.getLogger(__name__)

DEFAULT_GAMMA = 0.45


def premultiply_roundtrip(
    color: np.ndarray,
    alpha: np.ndarray,
    transparent_color: int = 0
) -> np.ndarray:
    """
    Premultiply color by alpha, then divide the alpha back out.

    The first step is round((c/255) * (a/255) * 255), the second
    floor((p/255) / (a/255) * 255). Both are evaluated in integer
    arithmetic: c*a/255 never has a fractional part of exactly .5, so
    adding 127 before the floor division rounds half up.

    Args:
        color: uint8 color values, shape (..., C)
        alpha: uint8 alpha values, broadcastable against color
        transparent_color: Value written where alpha == 0

    Returns:
        uint8 array with the same shape as color
    """
    c = color.astype(np.int32)
    a = np.broadcast_to(alpha.astype(np.int32), c.shape)

    premultiplied = (c * a + 127) // 255
    # p <= a for every channel, so p*255 // a never exceeds 255
    restored = np.zeros_like(c)
    np.floor_divide(premultiplied * 255, a, out=restored, where=a > 0)
    restored = np.where(a > 0, restored, transparent_color)

    return restored.astype(np.uint8)


def gamma_encode_alpha(alpha: np.ndarray, gamma: float = DEFAULT_GAMMA) -> np.ndarray:
    """
    Gamma-encode linear alpha as luma: round((a/255) ** gamma * 255).

    Args:
        alpha: uint8 alpha values
        gamma: Exponent of the encoding curve

    Returns:
        uint8 array with the same shape as alpha
    """
    normalized = alpha.astype(np.float64) / 255.0
    encoded = np.floor(normalized ** gamma * 255.0 + 0.5)
    return np.clip(encoded, 0, 255).astype(np.uint8)


def pack_alpha(
    image: RasterImage,
    gamma: float = DEFAULT_GAMMA,
    transparent_color: int = 0
) -> PackedRaster:
    """
    Build a raster twice the height of the input.

    The top half holds the color channels after a premultiply and
    un-premultiply pass, the bottom half holds the gamma-encoded alpha
    replicated into R, G and B. Both halves are fully opaque.

    Args:
        image: RGBA raster
        gamma: Exponent applied to alpha in the mask band
        transparent_color: Color band value for fully transparent pixels

    Returns:
        PackedRaster with height 2 * image.height

    Raises:
        UnsupportedFormat: If the raster does not have exactly 4 channels
        InvalidInput: If the raster has no pixels
    """
    if image.channels != 4:
        raise UnsupportedFormat(
            f"Input must contain an alpha channel (got {image.channels} channels, expected 4)"
        )
    if image.width <= 0 or image.height <= 0:
        raise InvalidInput(f"Raster has no pixels ({image.width}x{image.height})")
    if not 0 <= transparent_color <= 255:
        raise InvalidInput(f"transparent_color must be in 0..255, got {transparent_color}")

    height, width = image.height, image.width
    rgb = image.pixels[..., :3]
    alpha = image.pixels[..., 3:4]

    packed = np.full((2 * height, width, 4), 255, dtype=np.uint8)
    packed[:height, :, :3] = premultiply_roundtrip(rgb, alpha, transparent_color)
    packed[height:, :, :3] = gamma_encode_alpha(alpha, gamma)

    transparent = int(np.count_nonzero(alpha == 0))
    logger.debug(
        f"Packed {width}x{height} raster into {width}x{2 * height} "
        f"({transparent} fully transparent pixels)"
    )

    return PackedRaster(
        width=width,
        height=2 * height,
        channels=4,
        pixels=packed,
        source_height=height
    )
