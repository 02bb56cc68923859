"""maskjpg: alpha PNG -> opaque JPEG + masking SVG.

Packs color and alpha of an RGBA image into one double-height JPEG and
emits an <svg> whose filter chain turns the bottom half back into an
alpha mask at render time.
"""
from maskjpg.types import (
    RasterImage,
    PackedRaster,
    EncodedAsset,
    FingerprintPair,
    FilterOptions,
    MaskResult,
    MaskConfig,
    MaskJpgError,
    InvalidInput,
    UnsupportedFormat,
    EncodeFailure,
    IdDerivationFailure,
    IOFailure,
)
from maskjpg.alpha_packer import pack_alpha
from maskjpg.fingerprint import derive_ids
from maskjpg.svg_filter import compose_svg
from maskjpg.options import normalize_options
from maskjpg.pipeline import MaskPipeline, maskjpg

__version__ = "0.1.0"

__all__ = [
    "RasterImage",
    "PackedRaster",
    "EncodedAsset",
    "FingerprintPair",
    "FilterOptions",
    "MaskResult",
    "MaskConfig",
    "MaskJpgError",
    "InvalidInput",
    "UnsupportedFormat",
    "EncodeFailure",
    "IdDerivationFailure",
    "IOFailure",
    "pack_alpha",
    "derive_ids",
    "compose_svg",
    "normalize_options",
    "MaskPipeline",
    "maskjpg",
]
