"""
Stories component - story retrieval from the content delivery API.
"""

from ._impl import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    StoryService,
    cache_key,
    create_story_service,
)
from .component import (
    run_get_all,
    run_get_stories,
    run_get_story,
)
from .models import (
    GetAllStoriesInput,
    GetStoriesInput,
    GetStoryInput,
    StoriesOutput,
    StoryError,
    StoryOutput,
)
from .ports import CachePort, HttpPort, ThrottlePort
from .schemas import (
    StoriesResponse,
    Story,
    StoryQueryParameters,
    StoryResponse,
)

__all__ = [
    # Entry points
    "run_get_all",
    "run_get_stories",
    "run_get_story",
    # Input models
    "GetAllStoriesInput",
    "GetStoriesInput",
    "GetStoryInput",
    # Output models
    "StoriesOutput",
    "StoryError",
    "StoryOutput",
    # Schemas
    "StoriesResponse",
    "Story",
    "StoryQueryParameters",
    "StoryResponse",
    # Ports
    "CachePort",
    "HttpPort",
    "ThrottlePort",
    # Service
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "StoryService",
    "cache_key",
    "create_story_service",
]
