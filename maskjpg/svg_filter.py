"""SVG wrapper that rebuilds the alpha mask from a packed JPEG."""
import base64
import re
from html import escape
from typing import Dict, Mapping, Optional

from maskjpg.types import FingerprintPair, InvalidInput

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Copies the red channel into alpha and zeroes RGB
RED_TO_ALPHA_MATRIX = "0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 1 0 0 0 0"

XML_NAME = re.compile(r"^[A-Za-z_:][A-Za-z0-9_.:-]*$")


def data_uri(data: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def format_attributes(attributes: Mapping[str, str]) -> str:
    """
    Format a mapping as XML attributes.

    { 'key1': 'val1', 'key2': 'val2' } -> 'key1="val1" key2="val2"'

    Raises:
        InvalidInput: If a name is not a valid XML attribute name
    """
    parts = []
    for name, value in attributes.items():
        if not XML_NAME.match(name):
            raise InvalidInput(f"Invalid SVG attribute name: {name!r}")
        parts.append(f'{name}="{escape(str(value), quote=True)}"')
    return " ".join(parts)


def root_attributes(
    width: int,
    height: int,
    extra: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Generated <svg> attributes with caller attributes merged over them."""
    attributes = {
        "xmlns": SVG_NS,
        "xmlns:xlink": XLINK_NS,
        "width": str(width),
        "height": str(height),
        "viewBox": f"0 0 {width} {height}",
    }
    if extra:
        attributes.update(extra)
    return attributes


def compose_filter(height: int, ids: FingerprintPair) -> str:
    """
    Build the <filter> element.

    1. feOffset slides the mask band (bottom half) up over the color band.
    2. feColorMatrix turns the mask luma into alpha.
    3. feComposite keeps the source graphic where the mask is opaque.
    """
    id_a, id_b = ids
    return (
        f'<filter id="{id_a}">'
        f'<feOffset dy="-{height}" in="SourceGraphic" result="{id_b}"></feOffset>'
        f'<feColorMatrix in="{id_b}" result="{id_b}" type="matrix" '
        f'values="{RED_TO_ALPHA_MATRIX}"></feColorMatrix>'
        f'<feComposite in="SourceGraphic" in2="{id_b}" operator="in"></feComposite>'
        '</filter>'
    )


def compose_svg(
    width: int,
    height: int,
    uri: str,
    ids: FingerprintPair,
    attributes: Optional[Mapping[str, str]] = None
) -> str:
    """
    Generate the <svg> markup for a packed JPEG.

    The image is drawn at 100% width and 200% height so the mask band
    lands directly below the visible area before the offset filter
    moves it up.

    Args:
        width: Width of the original image
        height: Height of the original image, half the packed JPEG height
        uri: Path to the JPEG relative to the SVG, or a data URI
        ids: Filter ids, see fingerprint.derive_ids
        attributes: Additional <svg> attributes, e.g. {'class': 'logo'}

    Returns:
        SVG string
    """
    if width <= 0 or height <= 0:
        raise InvalidInput(f"SVG dimensions must be positive, got {width}x{height}")

    attrs = format_attributes(root_attributes(width, height, attributes))
    href = escape(uri, quote=True)
    id_a = ids.id_a

    return (
        f'<svg {attrs}>'
        '<defs>'
        f'{compose_filter(height, ids)}'
        '</defs>'
        f'<image width="100%" height="200%" xlink:href="{href}" filter="url(#{id_a})"></image>'
        '</svg>'
    )
