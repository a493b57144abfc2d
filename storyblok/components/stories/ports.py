"""
Stories component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar

from storyblok.core.ports.cache import CachePort
from storyblok.core.ports.http import HttpPort

T = TypeVar("T")


class ThrottlePort(Protocol):
    """Request rate limiter."""

    def execute(self, fn: Callable[[], T]) -> T:
        """Run `fn` once a request slot is free."""
        ...


__all__ = ["CachePort", "HttpPort", "ThrottlePort"]
