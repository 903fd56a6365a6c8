"""Interpreter for length-prefixed, checksummed messages in a live bit stream."""

__version__ = "0.1.0"
