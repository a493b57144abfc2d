"""
Story service - story retrieval with caching and cache versions.

Key behaviors:
- Published requests are served from the cache when possible
- Draft requests bypass the cache (and clear it in auto clear mode)
- A response carrying a new cache version (`cv`) clears the cache
- Cache versions are tracked per access token
- Cache failures are logged and never fail a request
- `get_all` walks every page using the `total` response header
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from threading import Lock
from typing import Any

from storyblok.core.ports.cache import CachePort
from storyblok.core.ports.http import HttpPort, HttpResult

from .ports import ThrottlePort
from .schemas import Story, StoriesResponse, StoryQueryParameters, StoryResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

STORIES_ENDPOINT = "cdn/stories"

CACHE_KEY_EXCLUDED = frozenset(["token", "cv"])


def cache_key(endpoint: str, query: Mapping[str, str]) -> str:
    """
    Deterministic cache key: endpoint plus sorted `k=v` pairs.

    The access token and the cache version are left out. A new cache
    version clears the cache, so entries never outlive it.
    """
    ordered = "_".join(
        f"{key}={query[key]}" for key in sorted(query) if key not in CACHE_KEY_EXCLUDED
    )
    return f"{endpoint}_{ordered}"


class StoryService:
    """Story retrieval over an HTTP port."""

    def __init__(
        self,
        http: HttpPort,
        access_token: str | None = None,
        cache: CachePort | None = None,
        throttle: ThrottlePort | None = None,
        auto_clear_cache: bool = False,
    ) -> None:
        self._http = http
        self._access_token = access_token
        self._cache = cache
        self._throttle = throttle
        self._auto_clear_cache = auto_clear_cache
        self._cache_versions: dict[str, int] = {}
        self._lock = Lock()

    # --- Cache Versions ---

    @property
    def cache_version(self) -> int:
        """Last seen cache version for the configured token (0 if none)."""
        if not self._access_token:
            return 0
        with self._lock:
            return self._cache_versions.get(self._access_token, 0)

    def set_cache_version(self, version: int) -> None:
        if not self._access_token:
            return
        with self._lock:
            self._cache_versions[self._access_token] = version

    def clear_cache(self) -> None:
        """Clear cached responses and forget the cache version."""
        if self._cache is not None:
            self._cache.clear()
        self.set_cache_version(0)

    # --- Queries ---

    def get_story(self, slug: str, params: StoryQueryParameters | None = None) -> StoryResponse:
        """
        Fetch one story by slug.

        Raises:
            ValueError: If slug is empty or no access token is available.
            StoryblokApiError: On API failure.
        """
        if not slug or not slug.strip():
            raise ValueError("Story slug cannot be empty")

        params = self._prepare(params)
        endpoint = f"{STORIES_ENDPOINT}/{slug.strip().lstrip('/')}"
        result = self._fetch(endpoint, params.to_query(multiple=False), params.is_draft)
        return StoryResponse.model_validate(result.data)

    def get_stories(self, params: StoryQueryParameters | None = None) -> StoriesResponse:
        """Fetch one page of stories."""
        params = self._prepare(params)
        result = self._fetch(STORIES_ENDPOINT, params.to_query(multiple=True), params.is_draft)
        return StoriesResponse.model_validate(result.data)

    def get_all(
        self,
        endpoint: str = STORIES_ENDPOINT,
        params: StoryQueryParameters | None = None,
    ) -> list[Story]:
        """
        Fetch every page of a listing endpoint.

        Page size defaults to 25 and is capped at 100.
        """
        if not endpoint or not endpoint.strip("/"):
            raise ValueError("Endpoint cannot be empty")

        params = self._prepare(params)
        endpoint = endpoint.strip("/")
        per_page = min(params.per_page, MAX_PAGE_SIZE) if params.per_page > 0 else DEFAULT_PAGE_SIZE

        first = self._fetch_page(endpoint, params, per_page, 1)
        stories = list(StoriesResponse.model_validate(first.data).stories)
        total = first.header_int("total", len(stories))
        pages = max(1, math.ceil(total / per_page))

        for page in range(2, pages + 1):
            result = self._fetch_page(endpoint, params, per_page, page)
            stories.extend(StoriesResponse.model_validate(result.data).stories)

        return stories

    # --- Internals ---

    def _prepare(self, params: StoryQueryParameters | None) -> StoryQueryParameters:
        params = params or StoryQueryParameters()
        updates: dict[str, Any] = {}
        if not params.token:
            updates["token"] = self._access_token
        if not params.cv and self.cache_version:
            updates["cv"] = str(self.cache_version)
        prepared = params.model_copy(update=updates) if updates else params
        if not prepared.token:
            raise ValueError("Access token is required")
        return prepared

    def _fetch_page(
        self,
        endpoint: str,
        params: StoryQueryParameters,
        per_page: int,
        page: int,
    ) -> HttpResult:
        paged = params.model_copy(update={"per_page": per_page, "page": page})
        return self._fetch(endpoint, paged.to_query(multiple=True), params.is_draft)

    def _fetch(self, endpoint: str, query: dict[str, str], draft: bool) -> HttpResult:
        if draft:
            if self._auto_clear_cache:
                self.clear_cache()
            return self._request(endpoint, query)

        key = cache_key(endpoint, query)
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        result = self._request(endpoint, query)
        self._cache_set(key, result)
        return result

    def _request(self, endpoint: str, query: dict[str, str]) -> HttpResult:
        if self._throttle is not None:
            return self._throttle.execute(lambda: self._http.get(endpoint, query))
        return self._http.get(endpoint, query)

    def _cache_get(self, key: str) -> HttpResult | None:
        if self._cache is None:
            return None
        try:
            entry = self._cache.get(key)
        except Exception as e:
            logger.warning("Cache read failed: %s", e)
            return None
        if entry is None:
            return None
        return HttpResult(status_code=200, data=entry["data"], headers=entry.get("headers", {}))

    def _cache_set(self, key: str, result: HttpResult) -> None:
        if self._cache is None:
            return
        try:
            cv = result.data.get("cv")
            if isinstance(cv, int) and cv != self.cache_version:
                self._cache.clear()
                self.set_cache_version(cv)
                logger.info("Cache version changed to %s, cache cleared", cv)
            self._cache.set(key, {"data": result.data, "headers": dict(result.headers)})
        except Exception as e:
            logger.warning("Cache write failed: %s", e)


# --- Factory ---


def create_story_service(
    http: HttpPort,
    access_token: str | None = None,
    cache: CachePort | None = None,
    throttle: ThrottlePort | None = None,
    auto_clear_cache: bool = False,
) -> StoryService:
    """Create a StoryService."""
    return StoryService(
        http=http,
        access_token=access_token,
        cache=cache,
        throttle=throttle,
        auto_clear_cache=auto_clear_cache,
    )
