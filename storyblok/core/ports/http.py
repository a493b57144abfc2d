"""
Content Delivery HTTP Interface.

Protocol-based interface for the content delivery API transport.
Story services build endpoint paths and query dicts; the adapter owns
the base URL and the retry policy.

Implementation strategies:
1. HttpxStoryblokClient: httpx-based client (production)
2. Test doubles: canned HttpResult values
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class HttpResult:
    """Decoded JSON response."""

    status_code: int
    data: dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)

    def header_int(self, name: str, default: int = 0) -> int:
        """Read an integer header, case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                try:
                    return int(value)
                except ValueError:
                    return default
        return default


class HttpPort(Protocol):
    """Content delivery transport."""

    def get(self, endpoint: str, query: Mapping[str, str] | None = None) -> HttpResult:
        """
        Issue a GET request against the API.

        Args:
            endpoint: Path relative to the API root, e.g. "cdn/stories/home".
            query: Query parameters, access token included.

        Raises:
            StoryblokApiError: On non-success status, exhausted retries or
                an undecodable body.
        """
        ...

    def close(self) -> None:
        """Release pooled connections."""
        ...


# --- Error Types ---


class StoryblokError(Exception):
    """Base exception for content delivery errors."""

    pass


class StoryblokApiError(StoryblokError):
    """The API returned an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, content: str = "") -> None:
        self.status_code = status_code
        self.content = content
        super().__init__(message)


class StoryblokRateLimitError(StoryblokApiError):
    """Rate limited (HTTP 429) after all retries."""

    def __init__(self, retry_after_seconds: float, content: str = "") -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded, retry after {retry_after_seconds}s",
            status_code=429,
            content=content,
        )
