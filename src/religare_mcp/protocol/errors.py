"""Exceptions raised while interpreting a bit stream.

All exceptions inherit from InterpreterError. A checksum mismatch is not
an exception: it yields a Message whose ``valid`` property is False.
"""

from __future__ import annotations


class InterpreterError(Exception):
    """Base exception for all structural interpretation failures."""


class TruncatedStream(InterpreterError):
    """The conduit closed before enough bits were available."""

    def __init__(
        self,
        message: str = "Conduit closed before enough bits were read",
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    def short_read(self, expected: int, received: int, what: str = "bits") -> TruncatedStream:
        """Same kind of error, re-stated for a read of ``expected`` bits."""
        reason = "Timed out" if isinstance(self, ReceiveTimeout) else "Conduit closed"
        return type(self)(
            f"{reason} after {received} of {expected} {what}",
            expected=expected,
            received=received,
        )


class ReceiveTimeout(TruncatedStream):
    """A deadline-bounded receive expired before a bit arrived."""


class UnknownMessageType(InterpreterError):
    """The header's type tag is not in the configured type table."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unknown message type tag: {tag}")
        self.tag = tag


class MalformedHeader(InterpreterError):
    """A header field could not be converted to its value."""


class PayloadDecodeError(InterpreterError):
    """Payload bits do not fit the codec of the declared message type."""

    def __init__(self, message: str, message_type: str | None = None) -> None:
        super().__init__(message)
        self.message_type = message_type
