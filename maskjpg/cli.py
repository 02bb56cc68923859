"""Command-line interface for maskjpg."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from maskjpg.pipeline import maskjpg
from maskjpg.raster_access import recompress
from maskjpg.types import MaskConfig, MaskJpgError


def parse_attribute(value: str):
    """Parse NAME=VALUE into a (name, value) tuple."""
    name, sep, attr_value = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return name, attr_value


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="maskjpg",
        description="Convert an alpha PNG into an <svg> that masks a JPG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Embed the JPG as a base64 data URI
  maskjpg alpha.png > alpha.svg

  # Reference an external JPG
  maskjpg alpha.png --uri /img/alpha.jpg --jpg public/img/alpha.jpg > alpha.svg
        """,
    )

    parser.add_argument("input", help="Input PNG path or http(s) URL")

    parser.add_argument(
        "--quality",
        type=float,
        default=None,
        help="1-100 JPG quality, or a fraction in (0, 1] (default: 80)",
    )

    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Resize the resulting SVG/JPG mask (default: width of original)",
    )

    parser.add_argument(
        "--uri",
        default=None,
        help="Web relative path to the JPG mask (default: base64 data URI in SVG)",
    )

    parser.add_argument(
        "--jpg",
        default=None,
        help="Where to save the JPG mask on disk",
    )

    parser.add_argument(
        "--attr",
        type=parse_attribute,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Additional <svg> attribute, may be repeated",
    )

    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Encode at full quality, then recompress with Huffman optimization",
    )

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the SVG to this file instead of standard output",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log pipeline stages to stderr"
    )

    return parser


def write_bytes(path: str, data: bytes) -> None:
    """Write data to path, creating parent directories."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = maskjpg(
            parsed.input,
            width=parsed.width,
            quality=parsed.quality,
            uri=parsed.uri,
            attr=dict(parsed.attr),
            config=MaskConfig(),
            recompressor=recompress if parsed.optimize else None,
        )
    except MaskJpgError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if parsed.jpg:
            write_bytes(parsed.jpg, result.jpg)
        if parsed.output:
            write_bytes(parsed.output, result.svg.encode("utf-8"))
        else:
            sys.stdout.write(result.svg)
    except OSError as e:
        print(f"Error: failed to write output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
