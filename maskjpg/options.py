"""Normalize caller-supplied options into FilterOptions."""
import logging
import math
from typing import Any, Mapping, Optional

from maskjpg.types import FilterOptions, InvalidInput, MaskConfig

logger = logging.getLogger(__name__)


def _number(value: Any, name: str) -> float:
    """Check value is a finite int or float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value}")
    return float(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_width(width: Any) -> int:
    """Target width as an integer. 0 or less means no resize."""
    if width is None:
        return 0
    return max(0, round_half_up(_number(width, "width")))


def normalize_quality(quality: Any, config: Optional[MaskConfig] = None) -> int:
    """
    JPEG quality as an integer between 1 and config.max_quality.

    Values in (0, 1] are fractions of 100. Anything rounding below 1
    falls back to config.default_quality; anything above max_quality is
    clamped to it.
    """
    config = config or MaskConfig()
    if quality is None:
        return config.default_quality

    value = _number(quality, "quality")
    if 0 < value <= 1:
        value *= 100

    rounded = round_half_up(value)
    if rounded < 1:
        logger.debug(f"Quality {quality} out of range, using default {config.default_quality}")
        return config.default_quality
    if rounded > config.max_quality:
        logger.debug(f"Quality {quality} clamped to {config.max_quality}")
        return config.max_quality
    return rounded


def normalize_uri(uri: Any) -> Optional[str]:
    """Reference URI, or None to embed the JPEG as a data URI."""
    if uri is None or uri == "":
        return None
    if not isinstance(uri, str):
        raise InvalidInput(f"uri must be a string, got {type(uri).__name__}")
    return uri


def normalize_attributes(attr: Any) -> dict:
    """Copy of the extra <svg> attributes, validated as str -> str."""
    if attr is None:
        return {}
    if not isinstance(attr, Mapping):
        raise InvalidInput(f"attr must be a mapping, got {type(attr).__name__}")
    for key, value in attr.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidInput(f"attr entries must be strings, got {key!r}: {value!r}")
    return dict(attr)


def normalize_options(
    width: Any = None,
    quality: Any = None,
    uri: Any = None,
    attr: Any = None,
    config: Optional[MaskConfig] = None
) -> FilterOptions:
    """
    Build FilterOptions from loosely specified caller options.

    Args:
        width: Desired output width. Default: source width
        quality: JPEG quality 1 to 100, or a fraction in (0, 1]
        uri: URI referencing the JPEG from the SVG. Default: data URI
        attr: Additional attributes for the <svg> element
        config: Pipeline configuration supplying defaults

    Returns:
        FilterOptions

    Raises:
        InvalidInput: If any option has the wrong type
    """
    return FilterOptions(
        width=normalize_width(width),
        quality=normalize_quality(quality, config),
        reference_uri=normalize_uri(uri),
        extra_attributes=normalize_attributes(attr)
    )
