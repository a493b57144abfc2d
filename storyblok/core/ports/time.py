"""
Time Interface.

Monotonic clock and sleep, injected so throttling, retries and cache
expiry can be tested with deterministic time.
"""

from __future__ import annotations

from typing import Protocol


class TimePort(Protocol):
    """Clock used for intervals, never for wall-clock timestamps."""

    def monotonic(self) -> float:
        """Seconds from an arbitrary, non-decreasing origin."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block the calling thread."""
        ...
