"""
Richtext component input/output models.

`RichTextContent` mirrors the CMS's rich text JSON; unknown fields are
ignored so a deserialized API response validates directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from storyblok.domain.options import RichTextOptions, SanitizerOptions

# --- Content Schema ---


class RichTextMark(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = ""
    attrs: dict[str, Any] | None = None


class RichTextContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = ""
    attrs: dict[str, Any] | None = None
    content: list[RichTextContent] | None = None
    text: str | None = None
    marks: list[RichTextMark] | None = None


class RichTextNodeFields(BaseModel):
    """One node's own fields; children stay raw and are validated one by one."""

    model_config = ConfigDict(extra="ignore")

    type: str = ""
    attrs: dict[str, Any] | None = None
    content: list[Any] | None = None
    text: str | None = None
    marks: list[RichTextMark] | None = None


# --- Error ---


@dataclass(frozen=True)
class RenderError:
    """Render failure surfaced by a component entry point."""

    code: str
    message: str
    node_type: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RenderRichTextInput:
    """Input for rendering a rich text document to HTML."""

    content: RichTextContent | dict[str, Any] | None
    options: RichTextOptions | None = None


@dataclass(frozen=True)
class SanitizeHtmlInput:
    """Input for sanitizing an HTML fragment."""

    html: str
    options: SanitizerOptions | None = None


# --- Output Models ---


@dataclass(frozen=True)
class RenderOutput:
    """Output for a rendered document."""

    html: str
    errors: list[RenderError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SanitizeOutput:
    """Output for sanitized HTML."""

    html: str
    errors: list[RenderError] = field(default_factory=list)
    success: bool = True
