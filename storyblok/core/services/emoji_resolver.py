"""Emoji Resolver - renders an emoji as a span wrapping its fallback image."""

from __future__ import annotations

from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import RichTextNode, attr_str
from storyblok.domain.html import format_attributes, wrap_in_tag
from storyblok.domain.keys import KeyCounter
from storyblok.domain.options import DEFAULT_OPTIONS, KEY_ATTRIBUTE, RichTextOptions

EMOJI_IMAGE_STYLE = "width: 1.25em; height: 1.25em; vertical-align: text-top"


class EmojiResolver:
    """Resolves emoji nodes; a missing `emoji` attribute renders nothing."""

    def __init__(
        self,
        options: RichTextOptions = DEFAULT_OPTIONS,
        keys: KeyCounter | None = None,
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._options = options
        self._keys = keys or KeyCounter()
        self._pool = pool

    def resolve(self, node: RichTextNode, options: RichTextOptions | None = None) -> str:
        opts = options or self._options
        emoji = attr_str(node.attrs, "emoji")
        if not emoji:
            return ""
        name = attr_str(node.attrs, "name", "") or ""

        span_attrs: dict[str, str] = {}
        if opts.keyed_resolvers:
            span_attrs[KEY_ATTRIBUTE] = self._keys.key_for("span")
        span_attrs.update({"data-type": "emoji", "data-name": name, "data-emoji": emoji})

        img_attrs = {
            "src": attr_str(node.attrs, "fallbackImage", "") or "",
            "alt": name,
            "style": EMOJI_IMAGE_STYLE,
            "draggable": "false",
            "loading": "lazy",
        }
        img = f"<img {format_attributes(img_attrs, self._pool)}>"
        return wrap_in_tag(img, "span", span_attrs, self._pool)
