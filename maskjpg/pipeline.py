"""Main pipeline orchestrator for maskjpg."""
import logging
from typing import Any, Optional

from maskjpg.alpha_packer import pack_alpha
from maskjpg.fingerprint import derive_ids
from maskjpg.options import normalize_options
from maskjpg.raster_access import (
    Recompressor,
    decode,
    encode_opaque,
    image_size,
    resize,
)
from maskjpg.source import SourceLike, read_source
from maskjpg.svg_filter import compose_svg, data_uri
from maskjpg.types import (
    EncodeFailure,
    EncodedAsset,
    FilterOptions,
    MaskConfig,
    MaskResult,
    PackedRaster,
)

logger = logging.getLogger(__name__)


class MaskPipeline:
    """Alpha PNG -> <svg> + JPG."""

    def __init__(
        self,
        config: Optional[MaskConfig] = None,
        recompressor: Optional[Recompressor] = None
    ):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
            recompressor: Optional size optimization pass run on the JPEG
        """
        self.config = config or MaskConfig()
        self.recompressor = recompressor

    def process(self, source: SourceLike, options: Optional[FilterOptions] = None) -> MaskResult:
        """Process an image into an SVG wrapper and its packed JPEG.

        Args:
            source: File path, http(s) URL or encoded image bytes
            options: Normalized options, see options.normalize_options

        Returns:
            MaskResult with the SVG markup and the JPEG bytes

        Raises:
            InvalidInput: If the source is missing, empty or unreadable
            UnsupportedFormat: If the image has no alpha channel
            EncodeFailure: If JPEG encoding fails
            IOFailure: If reading the source fails
        """
        options = options or normalize_options(config=self.config)

        data = read_source(source, timeout=self.config.url_timeout)
        image = decode(data)

        if options.width > 0:
            image = resize(image, options.width)

        # Heavy lifting: a JPEG twice the height of the input, color on top
        # and the alpha mask below
        packed = pack_alpha(
            image,
            gamma=self.config.gamma,
            transparent_color=self.config.transparent_color
        )

        asset = self._encode(packed, options.quality)
        ids = derive_ids(asset.data)

        uri = options.reference_uri or data_uri(asset.data, self.config.mime_type)
        svg = compose_svg(
            width=image.width,
            height=image.height,
            uri=uri,
            ids=ids,
            attributes=options.extra_attributes
        )

        logger.info(
            f"Masked {image.width}x{image.height} image: "
            f"JPEG {len(asset.data):,} bytes, SVG {len(svg):,} chars"
        )
        return MaskResult(svg=svg, jpg=asset.data)

    def _encode(self, packed: PackedRaster, quality: int) -> EncodedAsset:
        """Encode the packed raster, then run the recompressor if one is set."""
        if self.recompressor is None:
            data = encode_opaque(packed, quality)
            return EncodedAsset(data=data, width=packed.width, height=packed.height)

        encode_quality = self.config.encode_quality
        if encode_quality is None:
            encode_quality = self.config.max_quality
        unoptimized = encode_opaque(packed, encode_quality)
        try:
            data = self.recompressor(unoptimized, quality)
        except EncodeFailure:
            raise
        except Exception as e:
            raise EncodeFailure(f"Recompressor failed: {e}") from e

        size = image_size(data)
        if size != (packed.width, packed.height):
            raise EncodeFailure(
                f"Recompressor changed dimensions from "
                f"{packed.width}x{packed.height} to {size[0]}x{size[1]}"
            )

        return EncodedAsset(data=data, width=packed.width, height=packed.height)


def maskjpg(
    source: SourceLike,
    width: Any = None,
    quality: Any = None,
    uri: Any = None,
    attr: Any = None,
    config: Optional[MaskConfig] = None,
    recompressor: Optional[Recompressor] = None
) -> MaskResult:
    """
    Alpha PNG -> <svg> + JPG.

    Args:
        source: Path to file, URL, or bytes
        width: Desired width of JPG/SVG. Default: input width
        quality: JPG quality 1 to 100. Default: 80
        uri: URI to reference the JPG in the SVG. Default: data URI
        attr: Additional attributes for the <svg> element
        config: Pipeline configuration
        recompressor: Optional JPEG size optimization pass

    Returns:
        MaskResult
    """
    options = normalize_options(width=width, quality=quality, uri=uri, attr=attr, config=config)
    return MaskPipeline(config, recompressor).process(source, options)
