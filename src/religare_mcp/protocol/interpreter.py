"""Message interpreter: turns a stream of bits into decoded messages.

Each call to :meth:`BinaryDataInterpreter.next_message` walks the states::

    AWAITING_TYPE_TAG -> AWAITING_CHECKSUM -> AWAITING_SIZE
        -> AWAITING_PAYLOAD -> DECODED -> VALID | INVALID

and ends in ERRORED on any structural failure. A checksum mismatch is
not a failure: the message is returned with ``valid`` False, which is
the common case when the bit source is unstructured noise.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from ..models.message import Header, Message
from .config import DEFAULT_CONFIG, ProtocolConfig
from .errors import InterpreterError, PayloadDecodeError, TruncatedStream
from .framing import read_bits, split_header

if TYPE_CHECKING:
    from ..transport.conduit import Conduit

logger = logging.getLogger(__name__)


class ParseState(Enum):
    """Progress of a single ``next_message`` call."""

    AWAITING_TYPE_TAG = "awaiting_type_tag"
    AWAITING_CHECKSUM = "awaiting_checksum"
    AWAITING_SIZE = "awaiting_size"
    AWAITING_PAYLOAD = "awaiting_payload"
    DECODED = "decoded"
    VALID = "valid"
    INVALID = "invalid"
    ERRORED = "errored"


def is_valid_string_message(
    expected_checksum: str,
    text: str,
    config: ProtocolConfig = DEFAULT_CONFIG,
) -> bool:
    """True if ``text`` checksums to exactly ``expected_checksum``."""
    return config.compute_checksum(text) == expected_checksum


def decode_payload(header: Header, bits: str) -> str:
    """Decode payload bits with the codec of ``header.message_type``.

    Raises:
        PayloadDecodeError: If the bits do not fit the codec.
    """
    message_type = header.message_type
    if len(bits) % message_type.unit_bits != 0:
        raise PayloadDecodeError(
            f"{len(bits)} payload bits is not a multiple of "
            f"{message_type.unit_bits} for {message_type.name}",
            message_type=message_type.name,
        )
    try:
        return message_type.decode(bits)
    except ValueError as e:
        raise PayloadDecodeError(str(e), message_type=message_type.name) from e


class BinaryDataInterpreter:
    """Reads framed messages from a bit conduit.

    Usage::

        interpreter = BinaryDataInterpreter(conduit)
        message = interpreter.next_message()
        if message.valid:
            print(message.payload)

    The interpreter must be the only consumer of ``conduit``.
    """

    def __init__(
        self,
        conduit: Conduit,
        config: ProtocolConfig = DEFAULT_CONFIG,
    ) -> None:
        self._conduit = conduit
        self._config = config
        self._state = ParseState.AWAITING_TYPE_TAG

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    @property
    def state(self) -> ParseState:
        """State reached by the most recent (or in-progress) call."""
        return self._state

    def read_header(self) -> Header:
        """Read one header, field by field, from the conduit.

        Raises:
            TruncatedStream: If the conduit closes mid-header.
            UnknownMessageType: If the type tag is not configured.
            MalformedHeader: If the size field cannot be decoded.
        """
        config = self._config
        try:
            self._state = ParseState.AWAITING_TYPE_TAG
            tag = read_bits(self._conduit, config.type_tag_bits)
            self._state = ParseState.AWAITING_CHECKSUM
            checksum = read_bits(self._conduit, config.checksum_bits)
            self._state = ParseState.AWAITING_SIZE
            size = read_bits(self._conduit, config.message_size_bits)
            header = split_header(tag + checksum + size, config)
        except TruncatedStream as e:
            consumed = self._consumed_before(e)
            self._state = ParseState.ERRORED
            raise e.short_read(config.header_bits, consumed, "header bits") from e
        except InterpreterError:
            self._state = ParseState.ERRORED
            raise

        logger.debug(
            "Parsed header: type=%s size=%d",
            header.message_type.name,
            header.size_bytes,
        )
        return header

    def _consumed_before(self, error: TruncatedStream) -> int:
        # Bits of fully read fields plus those of the field that failed.
        config = self._config
        completed = {
            ParseState.AWAITING_TYPE_TAG: 0,
            ParseState.AWAITING_CHECKSUM: config.type_tag_bits,
            ParseState.AWAITING_SIZE: config.type_tag_bits + config.checksum_bits,
        }.get(self._state, 0)
        return completed + (error.received or 0)

    def next_message(self) -> Message:
        """Read, decode and check the next message on the conduit.

        Returns:
            A Message; ``message.valid`` tells whether its checksum held.

        Raises:
            TruncatedStream: If the conduit closes mid-message.
            UnknownMessageType: If the type tag is not configured.
            MalformedHeader: If the size field cannot be decoded.
            PayloadDecodeError: If the payload does not fit its codec.
        """
        header = self.read_header()

        self._state = ParseState.AWAITING_PAYLOAD
        try:
            bits = read_bits(self._conduit, header.payload_bits(self._config.byte_size))
            payload = decode_payload(header, bits)
        except InterpreterError:
            self._state = ParseState.ERRORED
            raise
        self._state = ParseState.DECODED

        message = Message(
            header=header,
            payload=payload,
            digest=self._config.compute_checksum(payload),
        )
        self._state = ParseState.VALID if message.valid else ParseState.INVALID
        logger.debug("Decoded %r", message)
        return message

    def is_valid_string_message(self, expected_checksum: str, text: str) -> bool:
        """True if ``text`` checksums to exactly ``expected_checksum``."""
        return is_valid_string_message(expected_checksum, text, self._config)

    def messages(
        self,
        valid_only: bool = False,
        skip_errors: bool = True,
    ) -> Iterator[Message]:
        """Keep reading messages until the conduit is exhausted.

        Args:
            valid_only: Drop messages whose checksum does not match.
            skip_errors: Log and continue past structural errors instead
                of raising them. Truncation always ends the iteration.
        """
        while True:
            try:
                message = self.next_message()
            except TruncatedStream as e:
                logger.debug("Stream ended: %s", e)
                return
            except InterpreterError as e:
                if not skip_errors:
                    raise
                logger.info("Skipping %s: %s", type(e).__name__, e)
                continue

            if valid_only and not message.valid:
                continue
            yield message
