"""Tests for the binary string codec."""

import pytest

from religare_mcp.models.bit import Bit
from religare_mcp.utils.binary import (
    BYTE_SIZE,
    binary_string_to_hex,
    binary_string_to_integer,
    binary_string_to_text,
    bit_values_to_binary_string,
    bits_to_bit_values,
    hex_to_binary_string,
    integer_to_binary_string,
    is_binary_string,
    text_to_binary_string,
    zfill,
)


def test_binary_to_integer():
    """Plain binary strings convert to their unsigned value."""
    assert binary_string_to_integer("101") == 5
    assert binary_string_to_integer("0000000000010100") == 20
    assert binary_string_to_integer("0") == 0


@pytest.mark.parametrize("bad", ["", "12", "0b101", "-1", " 1", "1_0", "abc"])
def test_binary_to_integer_rejects_non_binary(bad):
    """Anything that is not strictly 0/1 digits should raise."""
    with pytest.raises(ValueError):
        binary_string_to_integer(bad)


def test_integer_to_binary_pads():
    """Values are zero-padded on the left to the requested width."""
    assert integer_to_binary_string(5, 8) == "00000101"
    assert integer_to_binary_string(0, 4) == "0000"


def test_integer_to_binary_does_not_truncate():
    """Values wider than the field keep every digit."""
    assert integer_to_binary_string(300, 4) == "100101100"


def test_integer_to_binary_negative():
    """Negative values cannot be rendered as unsigned binary."""
    with pytest.raises(ValueError):
        integer_to_binary_string(-1, 8)


def test_size_field_roundtrip():
    """Size values across the 16-bit field survive a round-trip."""
    for n in (0, 1, 20, 255, 256, 65535):
        assert binary_string_to_integer(integer_to_binary_string(n, 16)) == n


def test_zfill():
    """zfill pads short strings and leaves long ones alone."""
    assert zfill("1", 4) == "0001"
    assert zfill("10101", 4) == "10101"


def test_text_to_binary():
    """Each character becomes one fixed-width chunk."""
    assert text_to_binary_string("A", 8) == "01000001"
    assert text_to_binary_string("hi", 8) == "0110100001101001"
    assert text_to_binary_string("A", 10) == "0001000001"
    assert text_to_binary_string("", 8) == ""


def test_binary_to_text():
    """8-bit chunks decode to characters."""
    assert binary_string_to_text("0100000101000010") == "AB"
    assert binary_string_to_text("") == ""


def test_text_roundtrip():
    """Byte-sized text survives encode then decode."""
    text = "Correct Testing message"
    assert binary_string_to_text(text_to_binary_string(text, BYTE_SIZE)) == text


def test_binary_to_text_bad_length():
    """Lengths that are not a multiple of 8 are rejected."""
    with pytest.raises(ValueError):
        binary_string_to_text("0100000")


def test_binary_to_text_non_binary():
    """Non-binary characters are rejected even at a valid length."""
    with pytest.raises(ValueError):
        binary_string_to_text("0100000X")


def test_hex_to_binary():
    """Each hex digit expands to 4 bits, in either case."""
    assert hex_to_binary_string("7b") == "01111011"
    assert hex_to_binary_string("F") == "1111"
    assert hex_to_binary_string("") == ""


def test_hex_to_binary_rejects_non_hex():
    """Non-hex digits raise."""
    with pytest.raises(ValueError):
        hex_to_binary_string("7g")


def test_binary_to_hex():
    """4-bit chunks decode to lower-case hex digits."""
    assert binary_string_to_hex("01111011") == "7b"
    assert binary_string_to_hex("1111") == "f"


def test_binary_to_hex_bad_length():
    """Lengths that are not a multiple of 4 are rejected."""
    with pytest.raises(ValueError):
        binary_string_to_hex("101")


def test_bits_to_bit_values_ignores_other_characters():
    """Only 0 and 1 characters become Bit values."""
    assert bits_to_bit_values("1 0x1") == [Bit.ONE, Bit.ZERO, Bit.ONE]


def test_bit_values_to_binary_string():
    """Bit values render back into a binary string."""
    assert bit_values_to_binary_string([Bit.ONE, Bit.ZERO, 1]) == "101"


def test_is_binary_string():
    """Empty strings and strings with other characters are not binary."""
    assert is_binary_string("0101")
    assert not is_binary_string("")
    assert not is_binary_string("01 1")


def test_bit_from_char():
    """Bit.from_char only accepts '0' and '1'."""
    assert Bit.from_char("1") is Bit.ONE
    assert Bit.ZERO.to_char() == "0"
    with pytest.raises(ValueError):
        Bit.from_char("2")
