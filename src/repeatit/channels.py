"""Unbuffered hand-off channel for the thread pipeline."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised when sending on, or receiving from, a closed and drained channel."""


class Channel(Generic[T]):
    """Synchronous channel holding at most one item in flight.

    ``send`` returns only once a receiver has taken the item and has come back
    for the next one (or the channel was closed), so the sender never runs
    ahead of whoever processes its items.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._cond = threading.Condition()
        self._send_lock = threading.Lock()
        self._item: T | None = None
        self._full = False
        self._in_hand = False
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Channel({self.name!r}, {state})"

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        with self._cond:
            return self._closed

    def send(self, item: T) -> None:
        """Hand ``item`` to a receiver and wait until it has been processed."""
        with self._send_lock, self._cond:
            if self._closed:
                raise ChannelClosed(f"send on closed channel {self.name!r}")
            self._item = item
            self._full = True
            self._cond.notify_all()
            while self._full and not self._closed:
                self._cond.wait()
            if self._full:
                self._item = None
                self._full = False
                raise ChannelClosed(f"channel {self.name!r} closed before item was received")
            while self._in_hand and not self._closed:
                self._cond.wait()
            self._in_hand = False

    def recv(self) -> T:
        """Take the next item, blocking until one is sent or the channel closes."""
        with self._cond:
            self._release()
            while not self._full and not self._closed:
                self._cond.wait()
            if not self._full:
                raise ChannelClosed(f"channel {self.name!r} is closed")
            item = self._item
            self._item = None
            self._full = False
            self._in_hand = True
            self._cond.notify_all()
            return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the channel and wake every blocked sender and receiver."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                item = self.recv()
            except ChannelClosed:
                return
            yield item

    def _release(self) -> None:
        if self._in_hand:
            self._in_hand = False
            self._cond.notify_all()
