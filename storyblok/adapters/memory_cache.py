"""
In-memory response caches implementing CachePort.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from storyblok.adapters.clock import SystemClock
from storyblok.core.ports.time import TimePort

logger = logging.getLogger(__name__)


class MemoryStoryCache:
    """Thread-safe dict cache with per-entry expiry."""

    def __init__(
        self,
        default_ttl_seconds: float | None = None,
        clock: TimePort | None = None,
    ) -> None:
        self._default_ttl = default_ttl_seconds
        self._clock = clock or SystemClock()
        self._entries: dict[str, tuple[dict[str, Any], float | None]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: dict[str, Any], ttl_seconds: float | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = self._clock.monotonic() + ttl if ttl is not None else None
        with self._lock:
            self._entries[key] = (value, expires_at)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cached responses", count)


class NullStoryCache:
    """Cache that stores nothing."""

    def get(self, key: str) -> dict[str, Any] | None:
        return None

    def set(self, key: str, value: dict[str, Any], ttl_seconds: float | None = None) -> None:
        return None

    def clear(self) -> None:
        return None
