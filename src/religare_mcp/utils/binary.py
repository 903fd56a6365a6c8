"""Conversions between binary strings, integers, text, and hex.

A *binary string* is a ``str`` made only of ``'0'`` and ``'1'`` characters,
most significant bit first. All functions are pure; malformed input raises
``ValueError``.
"""

from __future__ import annotations

import string
from typing import Iterable

from ..models.bit import Bit

BYTE_SIZE = 8
HEX_DIGIT_BITS = 4

_BINARY_DIGITS = frozenset("01")
_HEX_DIGITS = frozenset(string.hexdigits)


def is_binary_string(value: str) -> bool:
    """Return True if ``value`` is non-empty and contains only 0/1."""
    return bool(value) and set(value) <= _BINARY_DIGITS


def _require_binary(bits: str) -> None:
    # Empty input is allowed here; callers that need a value check separately.
    if bits and not set(bits) <= _BINARY_DIGITS:
        raise ValueError(f"Not a binary string: {bits!r}")


def zfill(bits: str, width: int) -> str:
    """Left-pad ``bits`` with zeros up to ``width`` characters."""
    if len(bits) >= width:
        return bits
    return "0" * (width - len(bits)) + bits


def binary_string_to_integer(bits: str) -> int:
    """Convert a binary string to an unsigned integer.

    Unlike ``int(bits, 2)`` this rejects signs, ``0b`` prefixes,
    underscores and whitespace.

    Raises:
        ValueError: If ``bits`` is empty or not strictly binary.
    """
    if not is_binary_string(bits):
        raise ValueError(f"Binary data is not convertible to int: {bits!r}")
    return int(bits, 2)


def integer_to_binary_string(value: int, width: int) -> str:
    """Render ``value`` in binary, zero-padded on the left to ``width``.

    Values needing more than ``width`` digits are not truncated.
    """
    if value < 0:
        raise ValueError(f"Value must be non-negative, got {value}")
    return zfill(format(value, "b"), width)


def text_to_binary_string(text: str, bits_per_char: int) -> str:
    """Encode each character's code point as a ``bits_per_char`` chunk."""
    return "".join(zfill(format(ord(char), "b"), bits_per_char) for char in text)


def hex_to_binary_string(hex_string: str) -> str:
    """Expand every hex digit into 4 bits.

    Raises:
        ValueError: If ``hex_string`` contains a non-hex character.
    """
    chunks = []
    for char in hex_string:
        if char not in _HEX_DIGITS:
            raise ValueError(f"Not a hex digit: {char!r}")
        chunks.append(format(int(char, 16), "04b"))
    return "".join(chunks)


def binary_string_to_text(bits: str) -> str:
    """Decode consecutive 8-bit chunks into characters.

    Raises:
        ValueError: If the length is not a multiple of 8 or the input
            is not binary.
    """
    if len(bits) % BYTE_SIZE != 0:
        raise ValueError(
            f"Binary string length is not a multiple of {BYTE_SIZE}: {len(bits)}"
        )
    _require_binary(bits)
    return "".join(
        chr(int(bits[i : i + BYTE_SIZE], 2))
        for i in range(0, len(bits), BYTE_SIZE)
    )


def binary_string_to_hex(bits: str) -> str:
    """Decode consecutive 4-bit chunks into lower-case hex digits.

    Raises:
        ValueError: If the length is not a multiple of 4 or the input
            is not binary.
    """
    if len(bits) % HEX_DIGIT_BITS != 0:
        raise ValueError(
            f"Binary string length is not a multiple of {HEX_DIGIT_BITS}: {len(bits)}"
        )
    _require_binary(bits)
    return "".join(
        format(int(bits[i : i + HEX_DIGIT_BITS], 2), "x")
        for i in range(0, len(bits), HEX_DIGIT_BITS)
    )


def bits_to_bit_values(bits: str) -> list[Bit]:
    """Convert a binary string into Bit values, skipping other characters."""
    return [Bit.from_char(char) for char in bits if char in _BINARY_DIGITS]


def bit_values_to_binary_string(bits: Iterable[int]) -> str:
    """Render Bit (or 0/1 int) values back into a binary string."""
    return "".join(Bit(bit).to_char() for bit in bits)
