"""
Reusable string buffers.

A checkout pool of StringIO buffers: each acquire hands out a buffer no
other caller holds until it is released. Buffers that grew past
`max_retained_capacity` characters are dropped on release instead of
being pooled.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from io import StringIO
from threading import Lock


class BufferPool:
    """Thread-safe pool of StringIO buffers."""

    def __init__(self, max_pool_size: int = 32, max_retained_capacity: int = 4096) -> None:
        if max_pool_size <= 0:
            raise ValueError("max_pool_size must be greater than zero")
        if max_retained_capacity <= 0:
            raise ValueError("max_retained_capacity must be greater than zero")

        self._max_pool_size = max_pool_size
        self._max_retained_capacity = max_retained_capacity
        self._free: list[StringIO] = []
        self._lock = Lock()

    @property
    def available(self) -> int:
        """Number of idle buffers in the pool."""
        with self._lock:
            return len(self._free)

    def acquire(self) -> StringIO:
        """Check out an empty buffer."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return StringIO()

    def release(self, buffer: StringIO) -> None:
        """Return a buffer to the pool after clearing it."""
        if buffer is None:
            raise ValueError("buffer is required")

        oversized = buffer.tell() > self._max_retained_capacity
        buffer.seek(0)
        buffer.truncate(0)
        if oversized:
            return

        with self._lock:
            if len(self._free) < self._max_pool_size:
                self._free.append(buffer)

    @contextmanager
    def borrow(self) -> Iterator[StringIO]:
        """Check out a buffer for the duration of a with-block."""
        buffer = self.acquire()
        try:
            yield buffer
        finally:
            self.release(buffer)

    def join(self, parts: Iterable[str]) -> str:
        """Concatenate `parts` using a pooled buffer."""
        with self.borrow() as buffer:
            for part in parts:
                buffer.write(part)
            return buffer.getvalue()


DEFAULT_POOL = BufferPool()
