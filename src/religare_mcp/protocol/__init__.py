"""Protocol layer: configuration, header framing, and message interpretation."""

from .config import DEFAULT_CONFIG, ProtocolConfig
from .errors import (
    InterpreterError,
    MalformedHeader,
    PayloadDecodeError,
    ReceiveTimeout,
    TruncatedStream,
    UnknownMessageType,
)
from .framing import build_header, build_message, parse_header
from .interpreter import BinaryDataInterpreter, ParseState, is_valid_string_message
from .message_types import HEX, TEXT, MessageType
