# storyblok-richtext: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from storyblok.core.ports.cache import CachePort
from storyblok.core.ports.component import ComponentResolverPort
from storyblok.core.ports.http import (
    HttpPort,
    HttpResult,
    StoryblokApiError,
    StoryblokError,
    StoryblokRateLimitError,
)
from storyblok.core.ports.time import TimePort

__all__ = [
    # Cache
    "CachePort",
    # Components
    "ComponentResolverPort",
    # HTTP
    "HttpPort",
    "HttpResult",
    "StoryblokApiError",
    "StoryblokError",
    "StoryblokRateLimitError",
    # Time
    "TimePort",
]
