"""Deterministic SVG element ids derived from encoded image bytes."""
import re
from typing import Union

import xxhash

from maskjpg.types import FingerprintPair, IdDerivationFailure, InvalidInput

ALPHANUMERIC = "0123456789abcdefghijklmnopqrstuvwxyz"

# Disjoint leading letters keep the two ids distinct for every input
LEADING_A = "abcdefghijklm"
LEADING_B = "nopqrstuvwxyz"

ID_LENGTH = 3
ID_PATTERN = re.compile(r"^[a-z][0-9a-z]{2}$")

HASH_SEED = 0


def _token(value: int, leading: str) -> str:
    """Spell value as one leading letter followed by base-36 digits."""
    chars = []
    for _ in range(ID_LENGTH - 1):
        value, digit = divmod(value, len(ALPHANUMERIC))
        chars.append(ALPHANUMERIC[digit])
    chars.append(leading[value % len(leading)])
    return "".join(reversed(chars))


def token_space(leading: str) -> int:
    """Number of distinct tokens with the given set of leading letters."""
    return len(leading) * len(ALPHANUMERIC) ** (ID_LENGTH - 1)


def is_valid_id(token: str) -> bool:
    """True if token starts with a letter and is 3 lowercase alphanumerics."""
    return bool(ID_PATTERN.match(token))


def hash_bytes(data: Union[bytes, bytearray, memoryview]) -> int:
    """32-bit xxHash of data."""
    return xxhash.xxh32(bytes(data), seed=HASH_SEED).intdigest()


def derive_ids(data: Union[bytes, bytearray, memoryview]) -> FingerprintPair:
    """
    Derive two short ids from the hash of data.

    The 32-bit hash is read as a mixed-radix number: id_a takes the low
    digits, id_b the next ones. 16848 ** 2 < 2 ** 32, so both ids draw on
    separate parts of the hash and every hash value maps to a valid pair.

    Args:
        data: Encoded image bytes

    Returns:
        FingerprintPair with two distinct ids

    Raises:
        InvalidInput: If data is not a bytes-like object
        IdDerivationFailure: Never, every hash value maps to a valid pair
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInput(f"Expected bytes, got {type(data).__name__}")

    digest = hash_bytes(data)
    high, low = divmod(digest, token_space(LEADING_A))

    ids = FingerprintPair(
        id_a=_token(low, LEADING_A),
        id_b=_token(high, LEADING_B)
    )
    if not (is_valid_id(ids.id_a) and is_valid_id(ids.id_b)) or ids.id_a == ids.id_b:
        raise IdDerivationFailure(f"Invalid ids {ids.id_a!r}, {ids.id_b!r} from hash {digest:#010x}")
    return ids
