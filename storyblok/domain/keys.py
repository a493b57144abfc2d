"""Synthetic element keys for keyed rendering."""

from __future__ import annotations

from threading import Lock


class KeyCounter:
    """Monotonic counter producing `{tag}-{n}` keys; safe to share across threads."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def key_for(self, tag: str) -> str:
        return f"{tag}-{self.next()}"
