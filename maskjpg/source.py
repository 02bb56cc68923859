"""Resolve and read the input image from a file path, URL or bytes."""
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import requests

from maskjpg.types import InvalidInput, IOFailure

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class FilePath:
    """Image stored on the local filesystem."""
    path: Path


@dataclass(frozen=True)
class Url:
    """Image fetched over http(s)."""
    url: str


@dataclass(frozen=True)
class RawBytes:
    """Image already held in memory."""
    data: bytes


Source = Union[FilePath, Url, RawBytes]
SourceLike = Union[Source, str, os.PathLike, bytes, bytearray, memoryview]


def resolve_source(value: SourceLike) -> Source:
    """
    Turn a caller-supplied input into a Source variant.

    Strings starting with http:// or https:// are URLs, every other
    string or path-like is a file path.

    Raises:
        InvalidInput: If value is empty or of an unsupported type
    """
    if isinstance(value, (FilePath, Url, RawBytes)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        if len(value) == 0:
            raise InvalidInput("Input buffer is empty")
        return RawBytes(bytes(value))
    if isinstance(value, str):
        if not value:
            raise InvalidInput("Input must be a filepath, URL, or buffer.")
        if URL_PATTERN.match(value):
            return Url(value)
        return FilePath(Path(value))
    if isinstance(value, os.PathLike):
        return FilePath(Path(value))
    raise InvalidInput("Input must be a filepath, URL, or buffer.")


def _read_file(source: FilePath) -> bytes:
    path = source.path
    if not path.exists():
        raise InvalidInput(f"Image file not found: {path}")
    if not path.is_file():
        raise InvalidInput(f"Path is not a file: {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise IOFailure(f"Failed to read {path}: {e}") from e


def _read_url(source: Url, timeout: float) -> bytes:
    try:
        response = requests.get(source.url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise IOFailure(f"Failed to fetch {source.url}: {e}") from e
    return response.content


def read_source(source: SourceLike, timeout: float = 30.0) -> bytes:
    """
    Read the raw image bytes for a source.

    Args:
        source: Source variant or anything resolve_source accepts
        timeout: Seconds to wait for a URL response

    Returns:
        Encoded image bytes

    Raises:
        InvalidInput: If the source is missing or empty
        IOFailure: If reading the file or URL fails
    """
    source = resolve_source(source)

    if isinstance(source, RawBytes):
        data = source.data
    elif isinstance(source, Url):
        logger.debug(f"Fetching {source.url}")
        data = _read_url(source, timeout)
    else:
        logger.debug(f"Reading {source.path}")
        data = _read_file(source)

    if not data:
        raise InvalidInput("Input is empty")

    logger.debug(f"Read {len(data):,} bytes")
    return data
