"""
Thread-safe event channel used to hand watch events from a manager's
dispatch thread to the test thread.
"""

import threading
import time
from collections import deque
from typing import Any, Optional


class ChannelClosed(Exception):
    """Raised when sending on a closed channel, or receiving from a closed, drained one."""


class ChannelTimeout(TimeoutError):
    """Raised when receive() does not get an item before its deadline."""


class EventChannel:
    """
    FIFO channel with a send-side backpressure policy chosen by ``capacity``:

    - ``0``: unbuffered. send() returns only once a receiver has taken the item.
    - ``N > 0``: bounded. send() blocks while N items are waiting.
    - ``None``: unbounded. send() never blocks.

    close() wakes every blocked sender and receiver. Items already buffered can
    still be received after close; a sender whose item was not taken gets
    ChannelClosed and its item is dropped.
    """

    def __init__(self, capacity: Optional[int] = 0):
        if capacity is not None and capacity < 0:
            raise ValueError(f"capacity must be >= 0 or None, got {capacity}")
        self.capacity = capacity
        self._items = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._next_ticket = 0
        self._last_taken = -1

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def send(self, item: Any, timeout: Optional[float] = None) -> None:
        """
        Put an item on the channel, blocking according to the capacity.

        Args:
            item: Item to send
            timeout: Maximum seconds to block, None to wait forever

        Raises:
            ChannelClosed: If the channel is or becomes closed before delivery
            ChannelTimeout: If the timeout expires first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            if self.capacity:
                self._wait(lambda: self._closed or len(self._items) < self.capacity, deadline, "send")
            if self._closed:
                raise ChannelClosed("send on closed channel")

            ticket = self._next_ticket
            self._next_ticket += 1
            self._items.append((ticket, item))
            self._cond.notify_all()

            if self.capacity == 0:
                try:
                    self._wait(lambda: self._closed or self._last_taken >= ticket, deadline, "send")
                except ChannelTimeout:
                    self._discard(ticket)
                    raise
                if self._last_taken < ticket:
                    self._discard(ticket)
                    raise ChannelClosed("channel closed before the item was received")

    def receive(self, timeout: Optional[float] = None) -> Any:
        """
        Take the oldest item from the channel.

        Args:
            timeout: Maximum seconds to wait, None to wait forever

        Returns:
            The oldest item

        Raises:
            ChannelTimeout: If nothing arrives before the deadline
            ChannelClosed: If the channel is closed and empty
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            self._wait(lambda: self._items or self._closed, deadline, "receive")
            if not self._items:
                raise ChannelClosed("receive on closed channel")
            ticket, item = self._items.popleft()
            self._last_taken = ticket
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """Close the channel. Closing twice is a no-op."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self):
        """Receive items until the channel is closed and drained."""
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return

    def _wait(self, predicate, deadline: Optional[float], operation: str) -> None:
        # Must be called with self._cond held
        while not predicate():
            if deadline is None:
                self._cond.wait()
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ChannelTimeout(f"channel {operation} timed out")
            self._cond.wait(remaining)

    def _discard(self, ticket: int) -> None:
        for entry in self._items:
            if entry[0] == ticket:
                self._items.remove(entry)
                break
