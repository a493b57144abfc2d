"""
Text Resolver - encodes a text run once, then folds its marks over it.

Marks apply in document order: marks[0] wraps the encoded text, each
later mark wraps the previous result.
"""

from __future__ import annotations

from storyblok.core.services.mark_resolver import MarkResolver
from storyblok.domain.entities import RichTextNode
from storyblok.domain.html import encode
from storyblok.domain.options import DEFAULT_OPTIONS, RichTextOptions


class TextResolver:
    """Resolves leaf text nodes."""

    def __init__(
        self,
        marks: MarkResolver | None = None,
        options: RichTextOptions = DEFAULT_OPTIONS,
    ) -> None:
        self._options = options
        self._marks = marks or MarkResolver(options)

    def resolve(self, node: RichTextNode, options: RichTextOptions | None = None) -> str:
        opts = options or self._options
        if not node.text:
            return ""
        html = encode(node.text)
        for mark in node.marks:
            html = self._marks.resolve(mark.with_text(html), opts)
        return html
