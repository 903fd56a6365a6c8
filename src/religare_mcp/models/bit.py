"""Single binary digit carried by a bit conduit."""

from __future__ import annotations

from enum import IntEnum


class Bit(IntEnum):
    """A binary digit."""

    ZERO = 0
    ONE = 1

    @classmethod
    def from_char(cls, char: str) -> Bit:
        """Convert ``'0'`` or ``'1'`` into a Bit.

        Raises:
            ValueError: For any other character.
        """
        if char == "0":
            return cls.ZERO
        if char == "1":
            return cls.ONE
        raise ValueError(f"Not a binary digit: {char!r}")

    def to_char(self) -> str:
        return "1" if self is Bit.ONE else "0"
