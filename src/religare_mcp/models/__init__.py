"""Data models for bits, headers, and decoded messages."""

from .bit import Bit
from .message import Header, Message
