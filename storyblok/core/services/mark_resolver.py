"""
Mark Resolver - wraps inline HTML in the tag for one formatting mark.

The mark's `text` already holds HTML (encoded text or the output of an
inner mark), so it is wrapped as-is and never re-encoded. Unmapped marks
return that HTML unwrapped.
"""

from __future__ import annotations

from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import LinkType, MarkNode, MarkType, attr_str
from storyblok.domain.html import build_style_string, merge_attributes, wrap_in_tag
from storyblok.domain.keys import KeyCounter
from storyblok.domain.options import DEFAULT_OPTIONS, KEY_ATTRIBUTE, RichTextOptions

MARK_TAGS: dict[MarkType, str] = {
    MarkType.BOLD: "strong",
    MarkType.STRONG: "strong",
    MarkType.STRIKE: "s",
    MarkType.UNDERLINE: "u",
    MarkType.ITALIC: "em",
    MarkType.CODE: "code",
    MarkType.SUPERSCRIPT: "sup",
    MarkType.SUBSCRIPT: "sub",
    MarkType.HIGHLIGHT: "mark",
    MarkType.LINK: "a",
    MarkType.STYLED: "span",
    MarkType.TEXT_STYLE: "span",
}


class MarkResolver:
    """Resolves one mark around its inner HTML."""

    def __init__(
        self,
        options: RichTextOptions = DEFAULT_OPTIONS,
        keys: KeyCounter | None = None,
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._options = options
        self._keys = keys or KeyCounter()
        self._pool = pool

    def resolve(self, mark: MarkNode, options: RichTextOptions | None = None) -> str:
        opts = options or self._options
        tag = MARK_TAGS.get(mark.mark_type)
        if tag is None:
            return mark.text

        key = {KEY_ATTRIBUTE: self._keys.key_for(tag)} if opts.keyed_resolvers else None
        attrs = merge_attributes(self._mark_attributes(mark, opts), key)
        return wrap_in_tag(mark.text, tag, attrs, self._pool)

    def _mark_attributes(self, mark: MarkNode, opts: RichTextOptions) -> dict[str, str]:
        if mark.mark_type is MarkType.LINK:
            return self._link_attributes(mark, opts)

        if mark.mark_type is MarkType.STYLED:
            style = build_style_string(mark.attrs, self._pool)
            return {"style": style} if style else {}

        if mark.mark_type is MarkType.TEXT_STYLE:
            attrs: dict[str, str] = {}
            css_class = attr_str(mark.attrs, "class")
            if css_class:
                attrs["class"] = css_class
            declarations = {k: v for k, v in mark.attrs.items() if k != "class"}
            style = build_style_string(declarations, self._pool)
            if style:
                attrs["style"] = style
            return attrs

        return {}

    def _link_attributes(self, mark: MarkNode, opts: RichTextOptions) -> dict[str, str]:
        attrs: dict[str, str] = {}
        link_type = mark.link_type or LinkType.parse(attr_str(mark.attrs, "linktype"))
        href = opts.link_policy.resolve_href(
            attr_str(mark.attrs, "href"),
            link_type,
            attr_str(mark.attrs, "anchor"),
        )
        if href is not None:
            attrs["href"] = href
        target = attr_str(mark.attrs, "target")
        if target is not None:
            attrs["target"] = target
        return attrs
