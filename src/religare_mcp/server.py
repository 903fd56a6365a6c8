"""MCP server entry point for the bit-stream message interpreter.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .protocol.config import DEFAULT_CONFIG, ProtocolConfig
from .protocol.errors import InterpreterError
from .protocol.framing import build_message, split_header
from .protocol.interpreter import (
    BinaryDataInterpreter,
    ParseState,
    is_valid_string_message,
)
from .transport.conduit import conduit_from_bits
from .utils.binary import bit_values_to_binary_string, bits_to_bit_values
from .utils.checksum import CHECKSUMS

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "religare",
    instructions="Decode checksummed messages from a live stream of bits",
)

# Global session state
_config: ProtocolConfig = DEFAULT_CONFIG
_stream_open = False
_buffer = ""  # fed bits not yet consumed by a complete message
_bits_fed = 0
_last_state: ParseState | None = None


def _require_stream() -> None:
    """Raise if no live stream is open."""
    if not _stream_open:
        raise RuntimeError("No stream is open. Use the 'open_stream' tool first.")


def _error(e: Exception) -> dict[str, Any]:
    return {"error": type(e).__name__, "detail": str(e)}


# ─── CONFIGURATION TOOLS ─────────────────────────────────────────────

@mcp.tool()
def configure(
    checksum_bits: int | None = None,
    message_size_bits: int | None = None,
    checksum: str | None = None,
) -> dict[str, Any]:
    """Replace the protocol configuration used by new streams and decodes.

    Args:
        checksum_bits: Width of the header checksum field.
        message_size_bits: Width of the header size field.
        checksum: Checksum algorithm name (md5 or sum).
    """
    global _config
    try:
        _config = ProtocolConfig.from_dict({
            "checksum_bits": checksum_bits,
            "message_size_bits": message_size_bits,
            "checksum": checksum,
        })
    except ValueError as e:
        return {"error": str(e)}
    logger.info("Protocol configuration updated: %s", _config.to_dict())
    return _config.to_dict()


@mcp.tool()
def get_config() -> dict[str, Any]:
    """Show the active protocol configuration."""
    return _config.to_dict()


# ─── ENCODING / CHECKSUM TOOLS ───────────────────────────────────────

@mcp.tool()
def encode_message(payload: str, message_type: str = "text") -> dict[str, Any]:
    """Build the bit-string for a message (header followed by payload).

    Args:
        payload: Text, or hex digits for hex messages.
        message_type: Payload type name (text or hex).
    """
    try:
        kind = _config.message_type_named(message_type)
        bits = build_message(payload, kind, _config)
    except ValueError as e:
        return {"error": str(e)}
    return {"bits": bits, "length": len(bits), "message_type": kind.name}


@mcp.tool()
def compute_checksum(text: str) -> dict[str, Any]:
    """Compute the configured checksum of a text as a bit-string."""
    return {"checksum": _config.compute_checksum(text), "bits": _config.checksum_bits}


@mcp.tool()
def check_message(checksum_bits: str, text: str) -> dict[str, bool]:
    """Check whether a text matches an expected checksum bit-string."""
    return {"valid": is_valid_string_message(checksum_bits, text, _config)}


# ─── DECODING TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def decode_bits(bits: str, valid_only: bool = False) -> dict[str, Any]:
    """Scan a finite bit-string and decode every message in it.

    Characters other than 0 and 1 are ignored. Structural errors are
    skipped; scanning continues with the following bits.

    Args:
        bits: The bit-string to scan.
        valid_only: Only report messages whose checksum matches.
    """
    interpreter = BinaryDataInterpreter(conduit_from_bits(bits), _config)
    messages = [m.to_dict() for m in interpreter.messages(valid_only=valid_only)]
    return {"messages": messages, "count": len(messages)}


@mcp.tool()
def open_stream() -> dict[str, Any]:
    """Open a live bit stream. Feed it with feed_bits, read with read_message."""
    global _stream_open, _buffer, _bits_fed, _last_state
    if _stream_open:
        return {"open": True, "message": "Stream already open"}

    _stream_open = True
    _buffer = ""
    _bits_fed = 0
    _last_state = None
    logger.info("Stream opened")
    return {"open": True, "header_bits": _config.header_bits}


@mcp.tool()
def feed_bits(bits: str) -> dict[str, Any]:
    """Append bits to the live stream buffer.

    Args:
        bits: A string of 0/1 characters; other characters are ignored.
    """
    global _buffer, _bits_fed
    _require_stream()
    chunk = bit_values_to_binary_string(bits_to_bit_values(bits))
    _buffer += chunk
    _bits_fed += len(chunk)
    return {"sent": len(chunk), "total": _bits_fed, "buffered": len(_buffer)}


@mcp.tool()
def read_message() -> dict[str, Any]:
    """Decode the next message once all of its bits have been fed.

    Returns ``{"pending": n}`` while ``n`` more bits are needed; nothing
    is consumed until a complete message is buffered. A header with an
    unknown type or malformed size is consumed and reported.
    """
    global _buffer, _last_state
    _require_stream()

    header_bits = _config.header_bits
    if len(_buffer) < header_bits:
        return {"pending": header_bits - len(_buffer), "buffered": len(_buffer)}

    try:
        header = split_header(_buffer[:header_bits], _config)
    except InterpreterError as e:
        _buffer = _buffer[header_bits:]
        _last_state = ParseState.ERRORED
        return _error(e)

    total = header_bits + header.payload_bits(_config.byte_size)
    if len(_buffer) < total:
        return {"pending": total - len(_buffer), "buffered": len(_buffer)}

    message_bits, _buffer = _buffer[:total], _buffer[total:]
    interpreter = BinaryDataInterpreter(conduit_from_bits(message_bits), _config)
    try:
        message = interpreter.next_message()
    except InterpreterError as e:
        return _error(e)
    finally:
        _last_state = interpreter.state
    return message.to_dict()


@mcp.tool()
def close_stream() -> dict[str, Any]:
    """Close the live stream, discarding any incomplete buffered bits."""
    global _stream_open, _buffer, _last_state
    if not _stream_open:
        return {"closed": True}
    discarded = len(_buffer)
    _stream_open = False
    _buffer = ""
    _last_state = None
    logger.info("Stream closed after %d bits (%d discarded)", _bits_fed, discarded)
    return {"closed": True, "discarded": discarded}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("religare://protocol/config")
def resource_config() -> str:
    """Active protocol configuration as JSON."""
    return json.dumps(_config.to_dict(), indent=2)


@mcp.resource("religare://protocol/message-types")
def resource_message_types() -> str:
    """Known message types and checksum algorithms."""
    return json.dumps({
        "message_types": [t.to_dict() for t in _config.message_types],
        "checksums": list(CHECKSUMS),
    }, indent=2)


@mcp.resource("religare://stream/status")
def resource_stream_status() -> str:
    """Live stream status."""
    status: dict[str, Any] = {"open": _stream_open}
    if _stream_open:
        status["bits_fed"] = _bits_fed
        status["buffered"] = len(_buffer)
        status["state"] = _last_state.value if _last_state else None
    return json.dumps(status, indent=2)


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def interpret_stream(bits: str) -> str:
    """Decode a captured bit-string and summarize what it contains.

    Args:
        bits: The captured bit-string.
    """
    length = sum(1 for c in bits if c in "01")
    return f"""Decode the following {length}-bit capture with the decode_bits tool.

Report:
- How many messages were found, and how many have a valid checksum
- The payload of each valid message
- Whether the invalid ones look like noise or like corrupted real messages

Header layout: {_config.type_tag_bits}-bit type tag, {_config.checksum_bits}-bit checksum, {_config.message_size_bits}-bit size in bytes.

Capture:
{bits}"""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
