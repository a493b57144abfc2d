"""
Rich text rendering options.

All option objects are frozen; a render call reads them but never changes
them, so one instance can be shared by concurrent renders.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from storyblok.domain.entities import LinkType
from storyblok.domain.html import SELF_CLOSING_TAGS
from storyblok.domain.policy import InvalidNodeStrategy

ComponentCallback = Callable[[str, Mapping[str, Any]], str]

# --- Image Optimization ---


@dataclass(frozen=True)
class ImageFilters:
    """CDN image filters appended as a `filters:` path segment."""

    quality: int | None = None
    format: str | None = None
    grayscale: bool = False
    blur: int | None = None
    brightness: int | None = None
    rotate: int | None = None
    fill: str | None = None

    def tokens(self) -> list[str]:
        """Active filters as `name(value)` tokens, in CDN order."""
        tokens: list[str] = []
        if self.quality is not None:
            tokens.append(f"quality({self.quality})")
        if self.format:
            tokens.append(f"format({self.format.lower()})")
        if self.grayscale:
            tokens.append("grayscale()")
        if self.blur is not None:
            tokens.append(f"blur({self.blur})")
        if self.brightness is not None:
            tokens.append(f"brightness({self.brightness})")
        if self.rotate is not None:
            tokens.append(f"rotate({self.rotate})")
        if self.fill:
            tokens.append(f"fill({self.fill})")
        return tokens


@dataclass(frozen=True)
class SrcSetEntry:
    """One srcset breakpoint."""

    width: int
    pixel_density: int | None = None


@dataclass(frozen=True)
class ImageOptimizationOptions:
    """Attributes and CDN directives applied to optimized images."""

    width: int | None = None
    height: int | None = None
    loading: str | None = None
    css_class: str | None = None
    filters: ImageFilters | None = None
    srcset: tuple[SrcSetEntry, ...] = ()
    sizes: tuple[str, ...] = ()


# --- Links ---


@dataclass(frozen=True)
class LinkPolicy:
    """
    Optional href rewriting for link marks.

    Both rewrites are off by default; hrefs are copied verbatim.
    """

    prefix_email_links: bool = False
    append_anchor: bool = False

    def resolve_href(
        self,
        href: str | None,
        link_type: LinkType | None = None,
        anchor: str | None = None,
    ) -> str | None:
        if (
            self.prefix_email_links
            and link_type is LinkType.EMAIL
            and href
            and not href.lower().startswith("mailto:")
        ):
            href = f"mailto:{href}"
        if self.append_anchor and anchor:
            href = f"{href or ''}#{anchor}"
        return href


# --- Sanitizer ---


def _frozen_attribute_map(
    mapping: Mapping[str, frozenset[str]],
) -> Mapping[str, frozenset[str]]:
    return MappingProxyType(
        {tag.lower(): frozenset(a.lower() for a in attrs) for tag, attrs in mapping.items()}
    )


DEFAULT_ALLOWED_TAGS = frozenset(
    [
        "p",
        "br",
        "b",
        "i",
        "u",
        "em",
        "strong",
        "a",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "code",
        "pre",
        "hr",
        "kbd",
        "mark",
        "s",
        "sub",
        "sup",
        "span",
        "ul",
        "ol",
        "li",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "img",
        "figure",
        "figcaption",
        "picture",
        "source",
    ]
)

DEFAULT_ALLOWED_ATTRIBUTES: Mapping[str, frozenset[str]] = _frozen_attribute_map(
    {
        "*": frozenset(["class", "id", "title"]),
        "a": frozenset(["href", "target", "rel", "download", "uuid"]),
        "img": frozenset(
            ["src", "alt", "width", "height", "loading", "srcset", "sizes", "style", "draggable"]
        ),
        "source": frozenset(["src", "srcset", "type", "media"]),
        "span": frozenset(["style", "data-type", "data-name", "data-emoji"]),
    }
)

DEFAULT_URI_ATTRIBUTES = frozenset(["href", "src", "srcset", "cite", "action", "data"])

DEFAULT_ALLOWED_PROTOCOLS = frozenset(["http", "https", "mailto", "tel", "data"])

KEY_ATTRIBUTE = "key"


@dataclass(frozen=True)
class SanitizerOptions:
    """Allow-lists for the final HTML sanitizing pass."""

    allowed_tags: frozenset[str] = DEFAULT_ALLOWED_TAGS
    allowed_attributes: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: DEFAULT_ALLOWED_ATTRIBUTES
    )
    uri_attributes: frozenset[str] = DEFAULT_URI_ATTRIBUTES
    allowed_protocols: frozenset[str] = DEFAULT_ALLOWED_PROTOCOLS
    self_closing_tags: frozenset[str] = SELF_CLOSING_TAGS
    strip_comments: bool = True

    def with_global_attribute(self, name: str) -> SanitizerOptions:
        """Return a copy that also allows `name` on every tag."""
        merged = dict(self.allowed_attributes)
        merged["*"] = merged.get("*", frozenset()) | {name.lower()}
        return replace(self, allowed_attributes=_frozen_attribute_map(merged))


def build_sanitizer_options(
    allowed_tags: frozenset[str] | None = None,
    allowed_attributes: Mapping[str, frozenset[str]] | None = None,
    uri_attributes: frozenset[str] | None = None,
    allowed_protocols: frozenset[str] | None = None,
    self_closing_tags: frozenset[str] | None = None,
    strip_comments: bool = True,
) -> SanitizerOptions:
    """Build sanitizer options, normalizing every name to lowercase."""
    defaults = SanitizerOptions()
    return SanitizerOptions(
        allowed_tags=frozenset(t.lower() for t in allowed_tags)
        if allowed_tags is not None
        else defaults.allowed_tags,
        allowed_attributes=_frozen_attribute_map(allowed_attributes)
        if allowed_attributes is not None
        else defaults.allowed_attributes,
        uri_attributes=frozenset(a.lower() for a in uri_attributes)
        if uri_attributes is not None
        else defaults.uri_attributes,
        allowed_protocols=frozenset(p.lower() for p in allowed_protocols)
        if allowed_protocols is not None
        else defaults.allowed_protocols,
        self_closing_tags=frozenset(t.lower() for t in self_closing_tags)
        if self_closing_tags is not None
        else defaults.self_closing_tags,
        strip_comments=strip_comments,
    )


# --- Render Options ---


@dataclass(frozen=True)
class RichTextOptions:
    """Options for one render call, or bound to a renderer instance."""

    optimize_images: bool = False
    image_options: ImageOptimizationOptions | None = None
    keyed_resolvers: bool = False
    invalid_node_handling: InvalidNodeStrategy = InvalidNodeStrategy.REMOVE
    sanitizer: SanitizerOptions = field(default_factory=SanitizerOptions)
    link_policy: LinkPolicy = field(default_factory=LinkPolicy)
    component_resolver: ComponentCallback | None = None

    def effective_sanitizer_options(self) -> SanitizerOptions:
        """Sanitizer options with the synthetic key attribute allowed when keyed."""
        if self.keyed_resolvers:
            return self.sanitizer.with_global_attribute(KEY_ATTRIBUTE)
        return self.sanitizer


DEFAULT_OPTIONS = RichTextOptions()
