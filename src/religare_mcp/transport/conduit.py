"""Blocking bit conduits connecting a bit producer to the interpreter.

A conduit delivers bits strictly in the order they were produced. It has
one producer and one consumer. ``receive()`` blocks until a bit is
available and raises ``TruncatedStream`` once the producer has closed the
conduit and every buffered bit has been consumed.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Iterable, Iterator, Protocol

from ..models.bit import Bit
from ..protocol.errors import ReceiveTimeout, TruncatedStream
from ..utils.binary import bits_to_bit_values

logger = logging.getLogger(__name__)

_CLOSED = object()


class Conduit(Protocol):
    """Anything the interpreter can pull bits from."""

    def receive(self) -> Bit: ...


def _to_bit(value: Bit | int | str) -> Bit:
    if isinstance(value, str):
        return Bit.from_char(value)
    return Bit(value)


class BitConduit:
    """Thread-safe FIFO of bits with an explicit close signal.

    Usage::

        conduit = BitConduit()
        conduit.send_bits("0101")
        conduit.close()
        bit = conduit.receive()
    """

    def __init__(self, maxsize: int = 0, timeout: float | None = None) -> None:
        """
        Args:
            maxsize: Buffer capacity in bits; 0 means unbounded.
            timeout: Default seconds ``receive()`` waits before raising
                ReceiveTimeout. None blocks until a bit or close.
        """
        self._queue: queue.Queue = queue.Queue(maxsize)
        self._timeout = timeout
        self._lock = threading.Lock()
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timeout(self) -> float | None:
        """Default seconds ``receive()`` waits for a bit."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: float | None) -> None:
        self._timeout = value

    def send(self, bit: Bit | int | str) -> None:
        """Append one bit.

        Raises:
            ValueError: If the conduit is closed or ``bit`` is not 0/1.
        """
        value = _to_bit(bit)
        with self._lock:
            if self._closed:
                raise ValueError("Cannot send on a closed conduit")
        self._queue.put(value)

    def send_bits(self, bits: str) -> int:
        """Append every 0/1 character of ``bits``; others are ignored.

        Returns:
            Number of bits sent.
        """
        values = bits_to_bit_values(bits)
        for value in values:
            self.send(value)
        return len(values)

    def close(self) -> None:
        """Signal end of stream. Buffered bits are still delivered."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_CLOSED)
        logger.debug("Conduit closed")

    def receive(self, timeout: float | None = None) -> Bit:
        """Take the next bit, blocking until one is available.

        Args:
            timeout: Seconds to wait; defaults to the conduit's timeout.

        Raises:
            TruncatedStream: If the conduit is closed and drained.
            ReceiveTimeout: If no bit arrived within the timeout.
        """
        if self._drained:
            raise TruncatedStream("Conduit is closed")

        wait = self._timeout if timeout is None else timeout
        try:
            item = self._queue.get(timeout=wait)
        except queue.Empty:
            raise ReceiveTimeout(f"No bit received within {wait} seconds") from None

        if item is _CLOSED:
            self._drained = True
            raise TruncatedStream("Conduit is closed")
        return item

    def __iter__(self) -> Iterator[Bit]:
        while True:
            try:
                yield self.receive()
            except TruncatedStream:
                return


class IterableConduit:
    """Adapt any iterable of bits to the conduit interface.

    Accepts Bit values, 0/1 ints, or a binary string. Exhausting the
    iterable is treated as closing the conduit.
    """

    def __init__(self, bits: Iterable[Bit | int | str]) -> None:
        self._iterator = iter(bits)
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._exhausted

    def receive(self) -> Bit:
        if self._exhausted:
            raise TruncatedStream("Bit source is exhausted")
        try:
            return _to_bit(next(self._iterator))
        except StopIteration:
            self._exhausted = True
            raise TruncatedStream("Bit source is exhausted") from None


def conduit_from_bits(bits: str) -> BitConduit:
    """Build a closed conduit pre-loaded with every 0/1 in ``bits``."""
    conduit = BitConduit()
    conduit.send_bits(bits)
    conduit.close()
    return conduit


def start_producer(
    conduit: BitConduit,
    bits: Iterable[Bit | int | str],
    delay: float = 0.0,
) -> threading.Thread:
    """Feed ``bits`` into ``conduit`` from a daemon thread, then close it.

    Args:
        conduit: Destination conduit.
        bits: Bits to send, in order.
        delay: Pause in seconds between bits.

    Returns:
        The started thread.
    """

    def _run() -> None:
        try:
            for bit in bits:
                conduit.send(bit)
                if delay:
                    time.sleep(delay)
        except ValueError as e:
            logger.warning("Producer stopped: %s", e)
        finally:
            conduit.close()

    thread = threading.Thread(target=_run, name="bit-producer", daemon=True)
    thread.start()
    return thread
