"""Immutable protocol configuration shared by header writers and readers.

Header layout (widths in bits, defaults shown)::

    +------------+------------+------------+-----------------------+
    | Type Tag   | Checksum   | Size       | Payload               |
    | 8          | 128        | 16         | size * 8              |
    +------------+------------+------------+-----------------------+
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..utils.binary import BYTE_SIZE, is_binary_string
from ..utils.checksum import (
    MD5_BITS,
    ChecksumFunction,
    checksum_name,
    get_checksum,
    md5_checksum,
)
from .errors import UnknownMessageType
from .message_types import DEFAULT_MESSAGE_TYPES, TYPE_TAG_BITS, MessageType

CHECKSUM_BITS = MD5_BITS
MESSAGE_SIZE_BITS = 16


@dataclass(frozen=True)
class ProtocolConfig:
    """Protocol constants and the checksum function of one deployment."""

    checksum_bits: int = CHECKSUM_BITS
    message_size_bits: int = MESSAGE_SIZE_BITS
    type_tag_bits: int = TYPE_TAG_BITS
    message_types: tuple[MessageType, ...] = DEFAULT_MESSAGE_TYPES
    checksum: ChecksumFunction = field(default=md5_checksum, compare=False)

    def __post_init__(self) -> None:
        for name in ("checksum_bits", "message_size_bits", "type_tag_bits"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        # Normalise lists passed by callers so the config stays hashable.
        object.__setattr__(self, "message_types", tuple(self.message_types))
        if not self.message_types:
            raise ValueError("At least one message type is required")

        tags: set[str] = set()
        names: set[str] = set()
        for message_type in self.message_types:
            if not is_binary_string(message_type.tag):
                raise ValueError(
                    f"Tag for '{message_type.name}' is not binary: {message_type.tag!r}"
                )
            if len(message_type.tag) != self.type_tag_bits:
                raise ValueError(
                    f"Tag for '{message_type.name}' must be {self.type_tag_bits} "
                    f"bits, got {len(message_type.tag)}"
                )
            if message_type.tag in tags:
                raise ValueError(f"Duplicate message type tag {message_type.tag}")
            if message_type.name in names:
                raise ValueError(f"Duplicate message type name '{message_type.name}'")
            tags.add(message_type.tag)
            names.add(message_type.name)

    @property
    def byte_size(self) -> int:
        return BYTE_SIZE

    @property
    def header_bits(self) -> int:
        return self.type_tag_bits + self.checksum_bits + self.message_size_bits

    @property
    def max_message_size(self) -> int:
        return (1 << self.message_size_bits) - 1

    def message_type_for_tag(self, tag: str) -> MessageType:
        """Map a tag bit pattern to its message type.

        Raises:
            UnknownMessageType: If no configured type uses ``tag``.
        """
        for message_type in self.message_types:
            if message_type.tag == tag:
                return message_type
        raise UnknownMessageType(tag)

    def message_type_named(self, name: str) -> MessageType:
        """Look up a message type by name (case-insensitive)."""
        for message_type in self.message_types:
            if message_type.name == name.lower():
                return message_type
        raise ValueError(
            f"Unknown message type '{name}'. "
            f"Valid: {[t.name for t in self.message_types]}"
        )

    def compute_checksum(self, text: str) -> str:
        """Checksum of ``text`` as a ``checksum_bits``-wide binary string."""
        return self.checksum(text, self.checksum_bits)

    def to_dict(self) -> dict[str, Any]:
        return {
            "byte_size": self.byte_size,
            "checksum_bits": self.checksum_bits,
            "message_size_bits": self.message_size_bits,
            "type_tag_bits": self.type_tag_bits,
            "header_bits": self.header_bits,
            "max_message_size": self.max_message_size,
            "checksum": checksum_name(self.checksum),
            "message_types": [t.to_dict() for t in self.message_types],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProtocolConfig:
        """Build a config from plain values.

        ``checksum`` is a registry name such as ``"md5"`` or ``"sum"``.
        Message types are always the built-in table.
        """
        kwargs: dict[str, Any] = {}
        for name in ("checksum_bits", "message_size_bits"):
            if data.get(name) is not None:
                kwargs[name] = int(data[name])
        if data.get("checksum") is not None:
            kwargs["checksum"] = get_checksum(data["checksum"])
        return cls(**kwargs)


DEFAULT_CONFIG = ProtocolConfig()
