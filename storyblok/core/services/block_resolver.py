"""
Block Resolver - recursive walker over the node tree.

Key behaviors:
- Leaves dispatch first: text, image, emoji, component, and the bare
  `<hr>` / `<br>` breaks
- Unknown kinds go to the invalid node policy
- Containers with neither children nor text render nothing
- Children render in document order; a failing child is replaced by its
  policy output unless the strategy is THROW
- Heading level picks the tag and is not emitted as an attribute
"""

from __future__ import annotations

import logging

from storyblok.core.services.component_resolver import ComponentNodeResolver
from storyblok.core.services.emoji_resolver import EmojiResolver
from storyblok.core.services.image_resolver import ImageResolver
from storyblok.core.services.mark_resolver import MarkResolver
from storyblok.core.services.text_resolver import TextResolver
from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import NodeKind, RichTextNode, attr_int
from storyblok.domain.html import encode, merge_attributes, wrap_in_tag
from storyblok.domain.keys import KeyCounter
from storyblok.domain.options import DEFAULT_OPTIONS, KEY_ATTRIBUTE, RichTextOptions
from storyblok.domain.policy import InvalidNodeStrategy, handle_invalid_node

logger = logging.getLogger(__name__)

BLOCK_TAGS: dict[NodeKind, str] = {
    NodeKind.PARAGRAPH: "p",
    NodeKind.BULLET_LIST: "ul",
    NodeKind.ORDERED_LIST: "ol",
    NodeKind.LIST_ITEM: "li",
    NodeKind.QUOTE: "blockquote",
    NodeKind.CODE_BLOCK: "pre",
}

BREAK_TAGS: dict[NodeKind, str] = {
    NodeKind.HORIZONTAL_RULE: "hr",
    NodeKind.HARD_BREAK: "br",
}


def heading_tag(node: RichTextNode) -> str:
    level = attr_int(node.attrs, "level", 1)
    return f"h{min(max(level, 1), 6)}"


class BlockResolver:
    """Resolves any node, recursing into container children."""

    def __init__(
        self,
        text: TextResolver | None = None,
        image: ImageResolver | None = None,
        emoji: EmojiResolver | None = None,
        components: ComponentNodeResolver | None = None,
        options: RichTextOptions = DEFAULT_OPTIONS,
        keys: KeyCounter | None = None,
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._options = options
        self._keys = keys or KeyCounter()
        self._pool = pool
        self._text = text or TextResolver(MarkResolver(options, self._keys, pool), options)
        self._image = image or ImageResolver(options, self._keys, pool)
        self._emoji = emoji or EmojiResolver(options, self._keys, pool)
        self._components = components or ComponentNodeResolver(options=options, pool=pool)

    def resolve(self, node: RichTextNode, options: RichTextOptions | None = None) -> str:
        """
        Render a node and its subtree.

        Raises:
            InvalidNodeError: For an invalid node when the strategy is THROW.
        """
        opts = options or self._options
        kind = node.kind

        if kind is NodeKind.TEXT:
            return self._text.resolve(node, opts)
        if kind is NodeKind.IMAGE:
            return self._image.resolve(node, opts)
        if kind is NodeKind.EMOJI:
            return self._emoji.resolve(node, opts)
        if kind is NodeKind.COMPONENT:
            return self._components.resolve(node, opts)
        if kind in BREAK_TAGS:
            return f"<{BREAK_TAGS[kind]}>"
        if kind is NodeKind.UNKNOWN:
            logger.debug("Invalid node of type '%s'", node.type_name)
            return handle_invalid_node(
                opts.invalid_node_handling, node.type_name, node.text, node.error
            )

        if node.is_empty:
            return ""

        content = self._resolve_content(node, opts)
        if kind is NodeKind.DOCUMENT:
            return content

        tag = heading_tag(node) if kind is NodeKind.HEADING else BLOCK_TAGS[kind]
        return wrap_in_tag(content, tag, self._tag_attributes(tag, node, opts), self._pool)

    def _resolve_content(self, node: RichTextNode, opts: RichTextOptions) -> str:
        if not node.content:
            return encode(node.text)
        with self._pool.borrow() as buffer:
            for child in node.content:
                buffer.write(self._resolve_child(child, opts))
            return buffer.getvalue()

    def _resolve_child(self, child: RichTextNode, opts: RichTextOptions) -> str:
        if opts.invalid_node_handling is InvalidNodeStrategy.THROW:
            return self.resolve(child, opts)
        try:
            return self.resolve(child, opts)
        except Exception as exc:
            logger.debug("Node of type '%s' failed to render: %s", child.type_name, exc)
            return handle_invalid_node(
                opts.invalid_node_handling, child.type_name, child.text, exc
            )

    def _tag_attributes(
        self,
        tag: str,
        node: RichTextNode,
        opts: RichTextOptions,
    ) -> dict[str, str]:
        structural = {
            name: value
            for name, value in node.attrs.items()
            if not (node.kind is NodeKind.HEADING and name == "level")
            and value is not None
            and not isinstance(value, (list, dict))
        }
        key = {KEY_ATTRIBUTE: self._keys.key_for(tag)} if opts.keyed_resolvers else None
        return merge_attributes(structural, key)
