"""
Stories component - API schemas.

Pydantic models for content delivery responses and query parameters.
Unknown response fields are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

StoryVersion = Literal["draft", "published"]


# --- Responses ---


class Story(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    uuid: str | None = None
    name: str = ""
    slug: str = ""
    full_slug: str = ""
    content: dict[str, Any] = {}
    created_at: datetime | None = None
    published_at: datetime | None = None
    first_published_at: datetime | None = None
    updated_at: datetime | None = None
    parent_id: int | None = None
    is_startpage: bool = False
    position: int = 0
    tag_list: list[str] = []
    group_id: str | None = None
    lang: str | None = None
    meta_data: dict[str, Any] | None = None


class StoryResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    story: Story
    cv: int = 0
    rels: list[Story] = []
    links: list[dict[str, Any]] = []


class StoriesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stories: list[Story] = []
    cv: int = 0
    rels: list[Story] = []
    links: list[dict[str, Any]] = []


# --- Query ---


class StoryQueryParameters(BaseModel):
    """
    Query parameters for story requests.

    Pagination (`page`, `per_page`) is only sent for listings.
    """

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    version: StoryVersion | None = None
    language: str | None = None
    cv: str | None = None
    page: int = 0
    per_page: int = 0
    starts_with: str | None = None
    search_term: str | None = None
    sort_by: str | None = None
    with_tag: str | None = None
    excluding_fields: str | None = None
    by_uuids: str | None = None
    by_uuids_ordered: str | None = None
    by_slugs: str | None = None
    fallback_lang: str | None = None
    resolve_links: str | None = None
    resolve_relations: list[str] = []
    resolve_level: int | None = None

    @property
    def is_draft(self) -> bool:
        return self.version == "draft"

    def to_query(self, multiple: bool = False) -> dict[str, str]:
        """
        Build the wire query.

        Raises:
            ValueError: If no access token is set.
        """
        if not self.token:
            raise ValueError("Access token is required")

        query: dict[str, str] = {"token": self.token}
        if self.version:
            query["version"] = self.version
        if self.language:
            query["language"] = self.language

        if multiple:
            if self.page > 0:
                query["page"] = str(self.page)
            if self.per_page > 0:
                query["per_page"] = str(self.per_page)

        optional = {
            "cv": self.cv,
            "starts_with": self.starts_with,
            "search_term": self.search_term,
            "sort_by": self.sort_by,
            "with_tag": self.with_tag,
            "by_uuids": self.by_uuids,
            "by_uuids_ordered": self.by_uuids_ordered,
            "by_slugs": self.by_slugs,
            "fallback_lang": self.fallback_lang,
            "excluding_fields": self.excluding_fields,
            "resolve_links": self.resolve_links,
        }
        query.update({key: value for key, value in optional.items() if value})

        if self.resolve_relations:
            query["resolve_relations"] = ",".join(self.resolve_relations)
        if self.resolve_level is not None:
            query["resolve_level"] = str(self.resolve_level)

        return query
