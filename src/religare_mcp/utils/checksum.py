"""Checksum functions mapping payload text to a fixed-width binary string.

Every function has the signature ``checksum(text, width) -> str`` and
returns exactly ``width`` bits. They detect accidental corruption only;
none of them is meant to be cryptographically meaningful here.
"""

from __future__ import annotations

import hashlib
from typing import Callable

from .binary import hex_to_binary_string, integer_to_binary_string, zfill

MD5_BITS = 128

ChecksumFunction = Callable[[str, int], str]


def md5_checksum(text: str, width: int = MD5_BITS) -> str:
    """MD5 of the UTF-8 text, expanded from its hex digest to bits.

    A narrower ``width`` keeps the leading bits; a wider one zero-pads
    on the left.
    """
    if width <= 0:
        raise ValueError(f"Checksum width must be positive, got {width}")
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    bits = hex_to_binary_string(digest)
    return zfill(bits[:width], width)


def sum_checksum(text: str, width: int) -> str:
    """Running sum of character code points modulo ``2**width``."""
    if width <= 0:
        raise ValueError(f"Checksum width must be positive, got {width}")
    total = sum(ord(char) for char in text) % (1 << width)
    return integer_to_binary_string(total, width)


CHECKSUMS: dict[str, ChecksumFunction] = {
    "md5": md5_checksum,
    "sum": sum_checksum,
}


def checksum_name(func: ChecksumFunction) -> str:
    """Registry name of ``func``, or its ``__name__`` if unregistered."""
    for name, registered in CHECKSUMS.items():
        if registered is func:
            return name
    return getattr(func, "__name__", repr(func))


def get_checksum(name: str) -> ChecksumFunction:
    """Look up a checksum function by registry name."""
    if name not in CHECKSUMS:
        raise ValueError(f"Unknown checksum '{name}'. Valid: {list(CHECKSUMS)}")
    return CHECKSUMS[name]
