"""Sliding window of append messages sent to a follower but not yet acknowledged."""

from __future__ import annotations

from collections import deque
from typing import Iterator, NamedTuple


class _Inflight(NamedTuple):
    index: int
    size: int


class Inflights:
    """Limits the number and total byte size of in-flight append messages.

    Callers check ``full()`` before sending, call ``add()`` for each append
    sent, and release quota with ``free_le()`` when an ack arrives.
    A ``max_bytes`` of 0 means there is no byte limit. The byte limit is soft:
    one message may take the total from below ``max_bytes`` to above it.
    """

    def __init__(self, size: int, max_bytes: int = 0) -> None:
        self.size = size
        self.max_bytes = max_bytes
        self.bytes = 0
        self._window: deque[_Inflight] = deque()

    def clone(self) -> Inflights:
        """Return an identical copy that shares no state with this one."""
        copy = Inflights(self.size, self.max_bytes)
        copy.bytes = self.bytes
        copy._window = deque(self._window)
        return copy

    def add(self, index: int, size: int) -> None:
        """Record a new message whose last entry is ``index``.

        Indexes passed to consecutive calls must be increasing.
        """
        if self.full():
            raise RuntimeError("cannot add into a Full inflights")
        self._window.append(_Inflight(index, size))
        self.bytes += size

    def free_le(self, to: int) -> None:
        """Free all in-flight messages with an index less than or equal to ``to``."""
        window = self._window
        while window and window[0].index <= to:
            self.bytes -= window.popleft().size

    def full(self) -> bool:
        """Return True if no more messages can be sent at the moment."""
        return len(self._window) == self.size or (
            self.max_bytes != 0 and self.bytes >= self.max_bytes
        )

    def count(self) -> int:
        """Return the number of in-flight messages."""
        return len(self._window)

    def reset(self) -> None:
        """Free all in-flight messages."""
        self._window.clear()
        self.bytes = 0

    def __iter__(self) -> Iterator[tuple[int, int]]:
        """Yield ``(index, size)`` pairs from oldest to newest."""
        return (tuple(item) for item in self._window)

    def __repr__(self) -> str:
        return (
            f"Inflights(size={self.size}, max_bytes={self.max_bytes}, "
            f"count={self.count()}, bytes={self.bytes})"
        )