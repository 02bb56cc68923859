"""Core types for the alpha mask pipeline."""
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np


class MaskJpgError(Exception):
    """Base exception for mask generation errors."""
    pass


class InvalidInput(MaskJpgError):
    """Source is missing, empty or unreadable, or an option is malformed."""
    pass


class UnsupportedFormat(MaskJpgError):
    """Raster does not carry exactly four channels."""
    pass


class EncodeFailure(MaskJpgError):
    """Opaque encoder or recompressor failed."""
    pass


class IdDerivationFailure(MaskJpgError):
    """Fingerprint ids could not be derived."""
    pass


class IOFailure(MaskJpgError):
    """Filesystem or network error while reading or writing."""
    pass


@dataclass
class RasterImage:
    """Decoded raster, pixels stored as a (height, width, channels) uint8 array."""
    width: int
    height: int
    channels: int
    pixels: np.ndarray

    def __post_init__(self):
        expected = self.width * self.height * self.channels
        if self.pixels.size != expected:
            raise InvalidInput(
                f"Pixel buffer holds {self.pixels.size} bytes, "
                f"expected {self.width}x{self.height}x{self.channels} = {expected}"
            )
        self.pixels = np.ascontiguousarray(
            self.pixels, dtype=np.uint8
        ).reshape(self.height, self.width, self.channels)

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int, channels: int) -> "RasterImage":
        """Build a raster from a flat, row-major byte buffer."""
        return cls(width, height, channels, np.frombuffer(data, dtype=np.uint8))

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()


@dataclass
class PackedRaster(RasterImage):
    """Double-height raster: color band on top, alpha mask band below."""
    source_height: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.height != 2 * self.source_height:
            raise InvalidInput(
                f"Packed height {self.height} is not twice the source height {self.source_height}"
            )

    @property
    def color_band(self) -> np.ndarray:
        return self.pixels[:self.source_height]

    @property
    def mask_band(self) -> np.ndarray:
        return self.pixels[self.source_height:]


@dataclass(frozen=True)
class EncodedAsset:
    """Opaque encoded bytes plus the packed dimensions they came from."""
    data: bytes
    width: int
    height: int


@dataclass(frozen=True)
class FingerprintPair:
    """Two element ids derived from the encoded bytes."""
    id_a: str
    id_b: str

    def __iter__(self):
        return iter((self.id_a, self.id_b))


@dataclass(frozen=True)
class FilterOptions:
    """Normalized invocation options. Build with options.normalize_options."""
    width: int = 0
    quality: int = 80
    reference_uri: Optional[str] = None
    extra_attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MaskResult:
    """SVG markup and the JPEG it references."""
    svg: str
    jpg: bytes

    @property
    def markup(self) -> str:
        return self.svg

    @property
    def encoded_bytes(self) -> bytes:
        return self.jpg


@dataclass
class MaskConfig:
    """Configuration for the mask pipeline."""
    # Quality
    default_quality: int = 80
    max_quality: int = 100
    encode_quality: Optional[int] = None  # None = max_quality when a recompressor runs

    # Packing
    gamma: float = 0.45
    transparent_color: int = 0  # Color band value where alpha == 0

    # Input
    url_timeout: float = 30.0  # Seconds

    # Output
    mime_type: str = "image/jpeg"

    def __post_init__(self):
        """Validate quality and packing ranges."""
        if not 1 <= self.max_quality <= 100:
            raise InvalidInput(f"max_quality must be in 1..100, got {self.max_quality}")
        if not 1 <= self.default_quality <= self.max_quality:
            raise InvalidInput(
                f"default_quality must be in 1..{self.max_quality}, got {self.default_quality}"
            )
        if self.encode_quality is not None and not 1 <= self.encode_quality <= self.max_quality:
            raise InvalidInput(
                f"encode_quality must be None or in 1..{self.max_quality}, got {self.encode_quality}"
            )
        if not 0 <= self.transparent_color <= 255:
            raise InvalidInput(f"transparent_color must be in 0..255, got {self.transparent_color}")
