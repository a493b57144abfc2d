"""
Rich text renderer - orchestrates mapping, resolution and sanitizing.

Key behaviors:
- None or childless content renders as ""
- Raw content (pydantic model or plain dict) maps to an immutable node tree,
  validated node by node
- The tree renders under a synthetic document root
- Failures are handled by the invalid node policy; only THROW propagates
- The output always passes through the sanitizer
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from storyblok.components.richtext.models import (
    RichTextContent,
    RichTextMark,
    RichTextNodeFields,
)
from storyblok.core.ports.component import ComponentResolverPort
from storyblok.core.services.block_resolver import BlockResolver
from storyblok.core.services.component_resolver import (
    ComponentNodeResolver,
    ComponentResolverChain,
)
from storyblok.core.services.emoji_resolver import EmojiResolver
from storyblok.core.services.image_resolver import ImageResolver
from storyblok.core.services.mark_resolver import MarkResolver
from storyblok.core.services.sanitizer import HtmlSanitizer
from storyblok.core.services.text_resolver import TextResolver
from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import (
    LinkType,
    MarkNode,
    MarkType,
    NodeKind,
    RichTextNode,
    attr_str,
    document,
    freeze_attrs,
)
from storyblok.domain.keys import KeyCounter
from storyblok.domain.options import DEFAULT_OPTIONS, RichTextOptions
from storyblok.domain.policy import (
    InvalidNodeError,
    InvalidNodeStrategy,
    handle_invalid_node,
    is_placeholder_comment,
)

logger = logging.getLogger(__name__)

RawContent = RichTextContent | Mapping[str, Any]


# --- Mapping ---


def map_mark(mark: RichTextMark, strategy: InvalidNodeStrategy) -> MarkNode:
    """
    Map a raw mark.

    Raises:
        InvalidNodeError: For an unparsable mark type when strategy is THROW.
    """
    try:
        mark_type = MarkType.parse(mark.type)
    except ValueError as e:
        if strategy is InvalidNodeStrategy.THROW:
            raise InvalidNodeError(f"mark:{mark.type}") from e
        mark_type = MarkType.UNKNOWN

    attrs = freeze_attrs(mark.attrs)
    return MarkNode(
        mark_type=mark_type,
        type_name=mark.type,
        attrs=attrs,
        link_type=LinkType.parse(attr_str(attrs, "linktype")),
    )


def _node_fields(raw: object) -> RichTextContent | RichTextNodeFields:
    if isinstance(raw, RichTextContent):
        return raw
    return RichTextNodeFields.model_validate(raw)


def map_node(raw: object, strategy: InvalidNodeStrategy) -> RichTextNode:
    """
    Map raw content into the immutable node tree.

    Each child is validated on its own, so a malformed child becomes an
    invalid node in place while its siblings still map.

    Raises:
        ValidationError: If `raw` itself is malformed.
    """
    fields = _node_fields(raw)
    return RichTextNode(
        kind=NodeKind.parse(fields.type),
        type_name=fields.type,
        attrs=freeze_attrs(fields.attrs),
        content=tuple(map_child(child, strategy) for child in fields.content or ()),
        text=fields.text,
        marks=tuple(map_mark(mark, strategy) for mark in fields.marks or ()),
    )


def map_child(raw: object, strategy: InvalidNodeStrategy) -> RichTextNode:
    """Map a child node, standing in an invalid node if it fails validation."""
    if strategy is InvalidNodeStrategy.THROW:
        return map_node(raw, strategy)
    try:
        return map_node(raw, strategy)
    except ValidationError as exc:
        type_name = raw.get("type") if isinstance(raw, Mapping) else None
        text = raw.get("text") if isinstance(raw, Mapping) else None
        logger.debug("Malformed node of type '%s': %s", type_name, exc)
        return RichTextNode(
            kind=NodeKind.UNKNOWN,
            type_name=type_name if isinstance(type_name, str) and type_name else "unknown",
            text=text if isinstance(text, str) else None,
            error=str(exc),
        )


def map_document(raw: RawContent, strategy: InvalidNodeStrategy) -> RichTextNode:
    """
    Build the synthetic document root.

    A document's children become the root's children; any other node is
    wrapped as the root's only child.

    Raises:
        ValidationError: If the top-level node itself is malformed.
    """
    fields = _node_fields(raw)
    if not fields.type or NodeKind.parse(fields.type) is NodeKind.DOCUMENT:
        return document(*(map_child(child, strategy) for child in fields.content or ()))
    return document(map_node(raw, strategy))


def _content_type(raw: object) -> str:
    if isinstance(raw, RichTextContent):
        return raw.type or "doc"
    if isinstance(raw, Mapping):
        return str(raw.get("type") or "doc")
    return "unknown"


def _is_blank(raw: RawContent) -> bool:
    if isinstance(raw, RichTextContent):
        return not raw.content and not raw.text and not raw.type
    return not raw


# --- Renderer ---


class RichTextRenderer:
    """
    Rich text to HTML renderer.

    Instances are long-lived and shared; render calls may run
    concurrently. The only shared mutable state is the key counter and
    the buffer pool, both thread-safe.
    """

    def __init__(
        self,
        options: RichTextOptions | None = None,
        component_resolvers: Iterable[ComponentResolverPort] = (),
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._options = options or DEFAULT_OPTIONS
        self._pool = pool
        self._keys = KeyCounter()
        self._chain = ComponentResolverChain(component_resolvers)

        marks = MarkResolver(self._options, self._keys, pool)
        self._blocks = BlockResolver(
            text=TextResolver(marks, self._options),
            image=ImageResolver(self._options, self._keys, pool),
            emoji=EmojiResolver(self._options, self._keys, pool),
            components=ComponentNodeResolver(self._chain, self._options, pool),
            options=self._options,
            keys=self._keys,
            pool=pool,
        )
        self._sanitizer = HtmlSanitizer(self._options.effective_sanitizer_options())

    @property
    def options(self) -> RichTextOptions:
        return self._options

    def add_component_resolver(self, resolver: ComponentResolverPort) -> None:
        """Append a resolver; earlier registrations take precedence."""
        self._chain.add(resolver)

    def render(self, content: RawContent | None, options: RichTextOptions | None = None) -> str:
        """
        Render rich text content to sanitized HTML.

        Args:
            content: Rich text JSON (model or dict). None yields "".
            options: Per-call options; default to the renderer's own.

        Raises:
            InvalidNodeError: On the first invalid node when the strategy
                is THROW. Other errors propagate only under THROW.
        """
        opts = options or self._options
        if content is None or _is_blank(content):
            return ""

        strategy = opts.invalid_node_handling
        try:
            root = map_document(content, strategy)
            html = self._blocks.resolve(root, opts)
        except Exception as exc:
            if strategy is InvalidNodeStrategy.THROW:
                raise
            logger.debug("Rich text render failed, applying %s policy: %s", strategy.value, exc)
            html = handle_invalid_node(strategy, _content_type(content), error=exc)

        return self._sanitize(html, opts)

    def _sanitize(self, html: str, opts: RichTextOptions) -> str:
        sanitizer = (
            self._sanitizer
            if opts is self._options
            else HtmlSanitizer(opts.effective_sanitizer_options())
        )
        if opts.invalid_node_handling is InvalidNodeStrategy.REPLACE:
            return sanitizer.sanitize(html, keep_comment=is_placeholder_comment)
        return sanitizer.sanitize(html)


# --- Factory ---


def create_rich_text_renderer(
    options: RichTextOptions | None = None,
    component_resolvers: Iterable[ComponentResolverPort] = (),
) -> RichTextRenderer:
    """Create a RichTextRenderer with optional options and resolvers."""
    return RichTextRenderer(options=options, component_resolvers=component_resolvers)
