"""Bit conduits feeding the interpreter."""

from .conduit import BitConduit, IterableConduit, conduit_from_bits, start_producer
