"""Message type tags and their payload codecs.

Each message type is identified by a fixed-width bit pattern carried at
the start of the header. The type decides how payload bits are turned
into a value (and back, on the writer side)::

    +------+----------+------------------------------+-------------------------+
    | Name | Tag      | Decode                       | Encode                  |
    +------+----------+------------------------------+-------------------------+
    | text | 00000001 | 8-bit chunks -> characters   | characters -> 8 bits    |
    | hex  | 00000010 | 4-bit chunks -> hex digits   | hex digits -> 4 bits    |
    +------+----------+------------------------------+-------------------------+
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from ..utils.binary import (
    BYTE_SIZE,
    HEX_DIGIT_BITS,
    binary_string_to_hex,
    binary_string_to_text,
    hex_to_binary_string,
    text_to_binary_string,
)

TYPE_TAG_BITS = 8


@dataclass(frozen=True)
class MessageType:
    """A message type variant keyed by its tag bit pattern."""

    name: str
    tag: str
    unit_bits: int
    decode: Callable[[str], str] = field(compare=False, repr=False)
    encode: Callable[[str], str] = field(compare=False, repr=False)

    def to_dict(self) -> dict:
        return {"name": self.name, "tag": self.tag, "unit_bits": self.unit_bits}


def _encode_text(payload: str) -> str:
    for char in payload:
        if ord(char) >= 1 << BYTE_SIZE:
            raise ValueError(f"Character {char!r} does not fit in {BYTE_SIZE} bits")
    return text_to_binary_string(payload, BYTE_SIZE)


TEXT = MessageType(
    name="text",
    tag="00000001",
    unit_bits=BYTE_SIZE,
    decode=binary_string_to_text,
    encode=_encode_text,
)

HEX = MessageType(
    name="hex",
    tag="00000010",
    unit_bits=HEX_DIGIT_BITS,
    decode=binary_string_to_hex,
    encode=hex_to_binary_string,
)

DEFAULT_MESSAGE_TYPES: tuple[MessageType, ...] = (TEXT, HEX)
