"""
Stories component - story retrieval from the content delivery API.

Shell Layer - handles I/O and error conversion.
"""

from __future__ import annotations

from pydantic import ValidationError

from storyblok.core.ports.http import StoryblokApiError

from ._impl import StoryService
from .models import (
    GetAllStoriesInput,
    GetStoriesInput,
    GetStoryInput,
    StoriesOutput,
    StoryError,
    StoryOutput,
)


def _api_error(e: StoryblokApiError) -> StoryError:
    return StoryError(code="api_error", message=str(e), status_code=e.status_code)


def _validation_error(e: ValueError) -> StoryError:
    code = "invalid_response" if isinstance(e, ValidationError) else "invalid_request"
    return StoryError(code=code, message=str(e))


# --- Shell Layer Functions ---


def run_get_story(
    input_data: GetStoryInput,
    service: StoryService,
) -> StoryOutput:
    """Fetch one story by slug."""
    try:
        response = service.get_story(input_data.slug, input_data.params)
    except StoryblokApiError as e:
        return StoryOutput(story=None, errors=[_api_error(e)], success=False)
    except ValueError as e:
        return StoryOutput(story=None, errors=[_validation_error(e)], success=False)

    return StoryOutput(story=response.story, cv=response.cv, errors=[], success=True)


def run_get_stories(
    input_data: GetStoriesInput,
    service: StoryService,
) -> StoriesOutput:
    """Fetch one page of stories."""
    try:
        response = service.get_stories(input_data.params)
    except StoryblokApiError as e:
        return StoriesOutput(errors=[_api_error(e)], success=False)
    except ValueError as e:
        return StoriesOutput(errors=[_validation_error(e)], success=False)

    return StoriesOutput(stories=response.stories, cv=response.cv, errors=[], success=True)


def run_get_all(
    input_data: GetAllStoriesInput,
    service: StoryService,
) -> StoriesOutput:
    """Fetch every page of a listing endpoint."""
    try:
        stories = service.get_all(input_data.endpoint, input_data.params)
    except StoryblokApiError as e:
        return StoriesOutput(errors=[_api_error(e)], success=False)
    except ValueError as e:
        return StoriesOutput(errors=[_validation_error(e)], success=False)

    return StoriesOutput(stories=stories, cv=service.cache_version, errors=[], success=True)
