"""
Stories component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .schemas import Story, StoryQueryParameters

# --- Error ---


@dataclass(frozen=True)
class StoryError:
    """Story retrieval error."""

    code: str
    message: str
    status_code: int | None = None


# --- Input Models ---


@dataclass(frozen=True)
class GetStoryInput:
    """Input for fetching one story by slug."""

    slug: str
    params: StoryQueryParameters | None = None


@dataclass(frozen=True)
class GetStoriesInput:
    """Input for fetching one page of stories."""

    params: StoryQueryParameters | None = None


@dataclass(frozen=True)
class GetAllStoriesInput:
    """Input for fetching every page of a listing endpoint."""

    endpoint: str = "cdn/stories"
    params: StoryQueryParameters | None = None


# --- Output Models ---


@dataclass(frozen=True)
class StoryOutput:
    """Output for a single story."""

    story: Story | None
    cv: int = 0
    errors: list[StoryError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class StoriesOutput:
    """Output for a list of stories."""

    stories: list[Story] = field(default_factory=list)
    cv: int = 0
    errors: list[StoryError] = field(default_factory=list)
    success: bool = True
