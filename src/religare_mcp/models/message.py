"""Header and message models produced by the interpreter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..protocol.message_types import MessageType


@dataclass(frozen=True)
class Header:
    """A parsed message header: type tag, checksum, payload size."""

    message_type: MessageType
    checksum: str
    size_bytes: int

    def payload_bits(self, byte_size: int = 8) -> int:
        """Number of payload bits that follow this header."""
        return self.size_bytes * byte_size

    def to_dict(self) -> dict:
        return {
            "message_type": self.message_type.name,
            "tag": self.message_type.tag,
            "checksum": self.checksum,
            "size_bytes": self.size_bytes,
        }


@dataclass(frozen=True)
class Message:
    """A decoded message.

    ``digest`` is the checksum recomputed over ``payload``; validity is
    always derived from it and the header checksum.
    """

    header: Header
    payload: str
    digest: str

    @property
    def valid(self) -> bool:
        return self.digest == self.header.checksum

    def to_dict(self) -> dict:
        return {
            "header": self.header.to_dict(),
            "payload": self.payload,
            "valid": self.valid,
        }

    def __repr__(self) -> str:
        return (
            f"Message(type={self.header.message_type.name}, "
            f"payload={self.payload!r}, valid={self.valid})"
        )
