from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from storyblok.adapters.http_client import HttpxStoryblokClient, build_base_url
from storyblok.adapters.memory_cache import MemoryStoryCache, NullStoryCache
from storyblok.app_shell.rate_limit import Throttle
from storyblok.components.richtext import RichTextRenderer
from storyblok.components.stories import StoryService
from storyblok.core.ports.cache import CachePort
from storyblok.settings.models import Settings


@dataclass
class StoryblokContext:
    settings: Settings
    http: HttpxStoryblokClient
    cache: CachePort
    throttle: Throttle
    stories: StoryService
    renderer: RichTextRenderer

    @classmethod
    def create(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> StoryblokContext:
        client_cfg = settings.client

        # Adapters
        http = HttpxStoryblokClient(
            base_url=build_base_url(client_cfg.region, client_cfg.https, client_cfg.endpoint),
            max_retries=client_cfg.max_retries,
            retry_delay=client_cfg.retry_delay_seconds,
            timeout=client_cfg.timeout_seconds,
            headers=client_cfg.headers,
            transport=transport,
        )
        cache: CachePort
        if settings.cache.type == "memory":
            cache = MemoryStoryCache(settings.cache.default_ttl_seconds)
        else:
            cache = NullStoryCache()
        throttle = Throttle(client_cfg.rate_limit)

        # Services
        stories = StoryService(
            http=http,
            access_token=client_cfg.access_token,
            cache=cache,
            throttle=throttle,
            auto_clear_cache=settings.cache.clear == "auto",
        )
        renderer = RichTextRenderer(settings.to_richtext_options())

        return cls(
            settings=settings,
            http=http,
            cache=cache,
            throttle=throttle,
            stories=stories,
            renderer=renderer,
        )

    def render_rich_text_field(self, story_content: Mapping[str, Any], field: str) -> str:
        """
        Render one rich text field of a story's content.

        Raises:
            KeyError: If the field is absent.
            ValueError: If the field is not a rich text document.
        """
        value = story_content[field]
        if value is None:
            return ""
        if not isinstance(value, Mapping):
            raise ValueError(f"Field '{field}' is not a rich text document")
        return self.renderer.render(value)

    def close(self) -> None:
        self.http.close()
