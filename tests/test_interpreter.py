"""Tests for the message interpreter."""

import pytest

from religare_mcp.protocol.config import DEFAULT_CONFIG, ProtocolConfig
from religare_mcp.protocol.errors import (
    PayloadDecodeError,
    ReceiveTimeout,
    TruncatedStream,
    UnknownMessageType,
)
from religare_mcp.protocol.framing import build_header, build_message
from religare_mcp.protocol.interpreter import (
    BinaryDataInterpreter,
    ParseState,
    is_valid_string_message,
)
from religare_mcp.protocol.message_types import HEX, TEXT, MessageType
from religare_mcp.transport.conduit import BitConduit, conduit_from_bits, start_producer
from religare_mcp.utils.binary import text_to_binary_string
from religare_mcp.utils.checksum import md5_checksum, sum_checksum

HEADER_BITS = DEFAULT_CONFIG.header_bits
UNKNOWN_HEADER = "11111111" + "0" * (HEADER_BITS - 8)

# MD5 of "Correct Testing message" expanded from its hex digest.
CORRECT_MESSAGE_CHECKSUM = (
    "01111011001010100011010011001010101100111101110000100011110010000000101110011111010011011011111110010011110011000000101111011110"
)
WRONG_MESSAGE_CHECKSUM = (
    "001101110110001000110010011000010011001100110110011000110110000101100010001100110110010001100011001100100011001101100011001110"
)


def _interpreter(bits: str, config: ProtocolConfig = DEFAULT_CONFIG) -> BinaryDataInterpreter:
    return BinaryDataInterpreter(conduit_from_bits(bits), config)


def _tampered(original: str, replacement: str) -> str:
    """Header of ``original`` followed by the payload bits of ``replacement``."""
    return build_message(original)[:HEADER_BITS] + text_to_binary_string(replacement, 8)


def test_valid_text_message():
    """Header and payload for 'hello' decode to a valid message."""
    interpreter = _interpreter(build_message("hello"))
    message = interpreter.next_message()
    assert message.payload == "hello"
    assert message.valid is True
    assert message.header.message_type is TEXT
    assert message.header.size_bytes == 5
    assert interpreter.state is ParseState.VALID


def test_checksum_mismatch_is_not_an_error():
    """A payload that does not match the header checksum is just invalid."""
    interpreter = _interpreter(_tampered("hello", "hellx"))
    message = interpreter.next_message()
    assert message.payload == "hellx"
    assert message.valid is False
    assert interpreter.state is ParseState.INVALID


def test_truncated_header():
    """A conduit closing after tag and checksum fails with TruncatedStream."""
    bits = build_message("hello")[: DEFAULT_CONFIG.type_tag_bits + DEFAULT_CONFIG.checksum_bits]
    interpreter = _interpreter(bits)
    with pytest.raises(TruncatedStream) as exc_info:
        interpreter.next_message()
    assert exc_info.value.expected == HEADER_BITS
    assert exc_info.value.received == len(bits)
    assert interpreter.state is ParseState.ERRORED


def test_truncated_mid_tag():
    """Truncation inside the type tag reports the bits consumed."""
    interpreter = _interpreter("0000")
    with pytest.raises(TruncatedStream) as exc_info:
        interpreter.read_header()
    assert exc_info.value.received == 4


def test_header_timeout_reports_header_bits():
    """A header read that times out keeps the timeout and the bit count."""
    conduit = BitConduit(timeout=0.01)
    conduit.send_bits(build_message("hello")[:20])
    interpreter = BinaryDataInterpreter(conduit)
    with pytest.raises(ReceiveTimeout) as exc_info:
        interpreter.read_header()
    assert "Timed out after 20 of 152 header bits" in str(exc_info.value)
    assert exc_info.value.received == 20
    assert interpreter.state is ParseState.ERRORED


def test_truncated_payload():
    """A conduit closing mid-payload fails with TruncatedStream."""
    interpreter = _interpreter(build_message("hello")[:-3])
    with pytest.raises(TruncatedStream) as exc_info:
        interpreter.next_message()
    assert exc_info.value.expected == 40
    assert exc_info.value.received == 37
    assert interpreter.state is ParseState.ERRORED


def test_unknown_message_type():
    """Unknown tags fail the call with UnknownMessageType."""
    interpreter = _interpreter(UNKNOWN_HEADER)
    with pytest.raises(UnknownMessageType):
        interpreter.next_message()
    assert interpreter.state is ParseState.ERRORED


def test_hex_message():
    """Hex messages decode to lower-case hex digits."""
    message = _interpreter(build_message("DEADbeef", HEX)).next_message()
    assert message.payload == "deadbeef"
    assert message.valid is True
    assert message.header.size_bytes == 4


def test_empty_payload():
    """A zero-size message carries an empty payload."""
    message = _interpreter(build_message("")).next_message()
    assert message.payload == ""
    assert message.header.size_bytes == 0
    assert message.valid is True


def test_payload_not_multiple_of_unit():
    """Payload bit counts that do not fit the codec unit are decode errors."""
    triple = MessageType(
        name="triple", tag="00000011", unit_bits=3,
        decode=lambda bits: bits, encode=lambda payload: payload,
    )
    config = ProtocolConfig(message_types=(TEXT, HEX, triple))
    bits = build_header(triple, md5_checksum("x"), 1, config) + "00000000"
    interpreter = _interpreter(bits, config)
    with pytest.raises(PayloadDecodeError) as exc_info:
        interpreter.next_message()
    assert exc_info.value.message_type == "triple"
    assert interpreter.state is ParseState.ERRORED


def test_codec_failure_is_decode_error():
    """ValueErrors from a payload codec surface as PayloadDecodeError."""

    def _reject(bits):
        raise ValueError("unsupported payload")

    strict = MessageType(
        name="strict", tag="00000100", unit_bits=8,
        decode=_reject, encode=lambda payload: payload,
    )
    config = ProtocolConfig(message_types=(TEXT, strict))
    bits = build_header(strict, md5_checksum("x"), 1, config) + "00000000"
    with pytest.raises(PayloadDecodeError):
        _interpreter(bits, config).next_message()


def test_message_validity_is_derived():
    """valid compares the recomputed digest with the header checksum."""
    message = _interpreter(build_message("hello")).next_message()
    assert message.digest == md5_checksum("hello")
    assert message.digest == message.header.checksum
    assert message.to_dict()["valid"] is True


def test_consecutive_messages():
    """Each call consumes a disjoint span of the conduit."""
    interpreter = _interpreter(build_message("one") + build_message("two"))
    assert interpreter.next_message().payload == "one"
    assert interpreter.next_message().payload == "two"
    with pytest.raises(TruncatedStream):
        interpreter.next_message()


def test_recovers_after_error():
    """A failed call does not prevent decoding the following bits."""
    interpreter = _interpreter(UNKNOWN_HEADER + build_message("after"))
    with pytest.raises(UnknownMessageType):
        interpreter.next_message()
    assert interpreter.next_message().payload == "after"


def test_sum_checksum_deployment():
    """Interpreters honour a non-default checksum configuration."""
    config = ProtocolConfig(checksum_bits=16, message_size_bits=8, checksum=sum_checksum)
    message = _interpreter(build_message("ping", config=config), config).next_message()
    assert message.valid is True
    assert message.header.checksum == sum_checksum("ping", 16)


def test_is_valid_string_message():
    """The predicate compares the recomputed checksum exactly."""
    text = "Correct Testing message"
    checksum = md5_checksum(text)
    flipped = ("1" if checksum[0] == "0" else "0") + checksum[1:]
    assert is_valid_string_message(checksum, text) is True
    assert is_valid_string_message(flipped, text) is False
    assert is_valid_string_message(checksum[:-1], text) is False
    assert is_valid_string_message(checksum, "This message will fail") is False


def test_is_valid_string_message_known_vectors():
    """Checksums captured from a reference sender."""
    assert md5_checksum("Correct Testing message") == CORRECT_MESSAGE_CHECKSUM
    assert is_valid_string_message(CORRECT_MESSAGE_CHECKSUM, "Correct Testing message") is True
    assert is_valid_string_message(WRONG_MESSAGE_CHECKSUM, "This message will fail") is False


def test_is_valid_string_message_idempotent():
    """Repeated calls give the same answer."""
    interpreter = BinaryDataInterpreter(BitConduit())
    checksum = md5_checksum("repeat")
    results = {interpreter.is_valid_string_message(checksum, "repeat") for _ in range(5)}
    assert results == {True}


def test_messages_scans_past_errors():
    """messages() skips structural errors and stops when the stream ends."""
    bits = (
        build_message("one")
        + UNKNOWN_HEADER
        + _tampered("hello", "hellx")
        + build_message("two")
        + "0101"
    )
    payloads = [m.payload for m in _interpreter(bits).messages()]
    assert payloads == ["one", "hellx", "two"]


def test_messages_valid_only():
    """valid_only drops messages with a checksum mismatch."""
    bits = build_message("one") + _tampered("hello", "hellx") + build_message("two")
    payloads = [m.payload for m in _interpreter(bits).messages(valid_only=True)]
    assert payloads == ["one", "two"]


def test_messages_raise_errors():
    """skip_errors=False propagates structural errors."""
    messages = _interpreter(build_message("one") + UNKNOWN_HEADER).messages(skip_errors=False)
    assert next(messages).payload == "one"
    with pytest.raises(UnknownMessageType):
        next(messages)


def test_threaded_producer():
    """Messages decode while a producer thread is still sending bits."""
    conduit = BitConduit()
    thread = start_producer(conduit, build_message("hello") + build_message("world"))
    interpreter = BinaryDataInterpreter(conduit)

    assert interpreter.next_message().payload == "hello"
    assert interpreter.next_message().payload == "world"
    with pytest.raises(TruncatedStream):
        interpreter.next_message()
    thread.join(timeout=5)
    assert not thread.is_alive()
