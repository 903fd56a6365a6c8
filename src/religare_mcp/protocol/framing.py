"""Header reader and message builder for the bit-level protocol.

Message layout (all fields MSB first)::

    +----------+----------+----------+---------------------------+
    | Type Tag | Checksum |   Size   |          Payload          |
    | T bits   | C bits   | S bits   | size * 8 bits             |
    +----------+----------+----------+---------------------------+

- Type Tag: identifies the payload codec (see ``message_types``)
- Checksum: digest of the *decoded* payload text
- Size: payload length in bytes, unsigned
- Payload: ``size * 8`` bits, decoded according to the type tag

Widths T, C and S come from a ``ProtocolConfig``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..models.bit import Bit
from ..models.message import Header
from ..utils.binary import (
    bit_values_to_binary_string,
    binary_string_to_integer,
    integer_to_binary_string,
    is_binary_string,
)
from .config import DEFAULT_CONFIG, ProtocolConfig
from .errors import MalformedHeader, TruncatedStream
from .message_types import TEXT, MessageType

if TYPE_CHECKING:
    from ..transport.conduit import Conduit

logger = logging.getLogger(__name__)


def read_bits(conduit: Conduit, count: int) -> str:
    """Pull exactly ``count`` bits from ``conduit`` as a binary string.

    Bits consumed before a failure are lost.

    Raises:
        TruncatedStream: If the conduit closes before ``count`` bits.
    """
    bits: list[Bit] = []
    for _ in range(count):
        try:
            bits.append(conduit.receive())
        except TruncatedStream as e:
            raise e.short_read(count, len(bits)) from e
    return bit_values_to_binary_string(bits)


def split_header(bits: str, config: ProtocolConfig = DEFAULT_CONFIG) -> Header:
    """Decode a complete header bit-string into a Header.

    Raises:
        UnknownMessageType: If the tag is not configured.
        MalformedHeader: If the bits are the wrong length or the size
            field is not binary.
    """
    if len(bits) != config.header_bits:
        raise MalformedHeader(
            f"Header must be {config.header_bits} bits, got {len(bits)}"
        )

    tag_end = config.type_tag_bits
    checksum_end = tag_end + config.checksum_bits

    tag = bits[:tag_end]
    checksum = bits[tag_end:checksum_end]
    size_field = bits[checksum_end:]

    message_type = config.message_type_for_tag(tag)

    try:
        size_bytes = binary_string_to_integer(size_field)
    except ValueError as e:
        raise MalformedHeader(f"Invalid size field: {e}") from e

    return Header(message_type=message_type, checksum=checksum, size_bytes=size_bytes)


def parse_header(conduit: Conduit, config: ProtocolConfig = DEFAULT_CONFIG) -> Header:
    """Read and decode one header from ``conduit``.

    Consumes exactly ``config.header_bits`` bits unless the conduit
    closes first.

    Raises:
        TruncatedStream: If the conduit closes mid-header.
        UnknownMessageType: If the type tag is not configured.
        MalformedHeader: If the size field cannot be decoded.
    """
    header = split_header(read_bits(conduit, config.header_bits), config)
    logger.debug(
        "Parsed header: type=%s size=%d",
        header.message_type.name,
        header.size_bytes,
    )
    return header


def build_header(
    message_type: MessageType,
    checksum: str,
    size_bytes: int,
    config: ProtocolConfig = DEFAULT_CONFIG,
) -> str:
    """Serialize header fields into their bit-string form.

    Raises:
        ValueError: If the checksum has the wrong width or the size is
            out of range.
    """
    if len(checksum) != config.checksum_bits or not is_binary_string(checksum):
        raise ValueError(
            f"Checksum must be {config.checksum_bits} binary digits, "
            f"got {len(checksum)} characters"
        )
    if not 0 <= size_bytes <= config.max_message_size:
        raise ValueError(
            f"Message size must be 0-{config.max_message_size}, got {size_bytes}"
        )
    size = integer_to_binary_string(size_bytes, config.message_size_bits)
    return message_type.tag + checksum + size


def build_message(
    payload: str,
    message_type: MessageType = TEXT,
    config: ProtocolConfig = DEFAULT_CONFIG,
) -> str:
    """Build the full bit-string (header + payload) for one message.

    Args:
        payload: Text for TEXT messages, hex digits for HEX messages.
        message_type: Payload codec to use.
        config: Protocol constants shared with the reader.

    Raises:
        ValueError: If the payload cannot be encoded, does not fill whole
            bytes, or is too large for the size field.
    """
    payload_bits = message_type.encode(payload)
    if len(payload_bits) % config.byte_size != 0:
        raise ValueError(
            f"Encoded {message_type.name} payload is {len(payload_bits)} bits, "
            f"not a multiple of {config.byte_size}"
        )
    size_bytes = len(payload_bits) // config.byte_size
    # Checksum the payload as the reader will decode it (e.g. lower-case hex).
    checksum = config.compute_checksum(message_type.decode(payload_bits))
    return build_header(message_type, checksum, size_bytes, config) + payload_bits
