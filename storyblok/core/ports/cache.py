"""
Response Cache Interface.

Caches decoded API responses keyed by endpoint and query. Implementations
must be safe to call from several threads.
"""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Response cache."""

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the cached value, or None if absent or expired."""
        ...

    def set(self, key: str, value: dict[str, Any], ttl_seconds: float | None = None) -> None:
        """Store a value; None uses the cache's default TTL."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...
