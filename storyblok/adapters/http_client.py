"""
httpx-based content delivery client.

Implements HttpPort. Retries rate-limited responses (HTTP 429) after the
`Retry-After` delay and transport errors after the configured retry
delay, up to `max_retries` retries.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

import httpx

from storyblok.core.ports.http import HttpResult, StoryblokApiError, StoryblokRateLimitError

logger = logging.getLogger(__name__)

REGION_HOSTS: dict[str, str] = {
    "eu": "api.storyblok.com",
    "us": "api-us.storyblok.com",
    "cn": "app.storyblokchina.cn",
    "ap": "api-ap.storyblok.com",
    "ca": "api-ca.storyblok.com",
}

API_PATH = "/v2"


def build_base_url(region: str = "eu", https: bool = True, endpoint: str | None = None) -> str:
    """
    API root URL for a region.

    Raises:
        ValueError: For an unknown region.
    """
    if endpoint:
        return endpoint.rstrip("/")
    host = REGION_HOSTS.get(region.lower())
    if host is None:
        raise ValueError(f"Unknown region: {region}")
    scheme = "https" if https else "http"
    return f"{scheme}://{host}{API_PATH}"


def _redact(query: Mapping[str, str]) -> dict[str, str]:
    return {k: ("***" if k == "token" else v) for k, v in query.items()}


def _retry_after(response: httpx.Response, default: float) -> float:
    value = response.headers.get("Retry-After")
    if value is None:
        return default
    try:
        return max(0.0, float(value))
    except ValueError:
        return default


class HttpxStoryblokClient:
    """Content delivery client over an httpx.Client."""

    def __init__(
        self,
        base_url: str,
        max_retries: int = 5,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            headers={"Accept": "application/json", **(headers or {})},
            timeout=timeout,
            transport=transport,
        )

    def get(self, endpoint: str, query: Mapping[str, str] | None = None) -> HttpResult:
        params = {k: v for k, v in (query or {}).items() if v}
        path = endpoint.lstrip("/")
        logger.debug("GET %s %s", path, _redact(params))

        response = self._send_with_retry(path, params)
        try:
            data = response.json()
        except ValueError as e:
            raise StoryblokApiError(
                f"Invalid JSON in response from {path}",
                status_code=response.status_code,
                content=response.text,
            ) from e
        if not isinstance(data, dict):
            raise StoryblokApiError(
                f"Unexpected response shape from {path}",
                status_code=response.status_code,
                content=response.text,
            )
        return HttpResult(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxStoryblokClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send_with_retry(self, path: str, params: dict[str, str]) -> httpx.Response:
        retries = 0
        while True:
            try:
                response = self._client.get(path, params=params)
            except httpx.TransportError as e:
                if retries >= self._max_retries:
                    raise StoryblokApiError(
                        f"Request to {path} failed after {retries} retries: {e}"
                    ) from e
                retries += 1
                logger.warning(
                    "Request to %s failed (%s), retry %d/%d in %.1fs",
                    path,
                    e,
                    retries,
                    self._max_retries,
                    self._retry_delay,
                )
                self._sleep(self._retry_delay)
                continue

            if response.is_success:
                return response

            if response.status_code == 429:
                delay = _retry_after(response, self._retry_delay)
                if retries >= self._max_retries:
                    raise StoryblokRateLimitError(delay, content=response.text)
                retries += 1
                logger.warning(
                    "Rate limited on %s, retry %d/%d in %.1fs",
                    path,
                    retries,
                    self._max_retries,
                    delay,
                )
                self._sleep(delay)
                continue

            raise StoryblokApiError(
                f"Request to {path} failed with status {response.status_code}",
                status_code=response.status_code,
                content=response.text,
            )
