"""
HTML Sanitizer - allow-list pass over rendered HTML.

Key behaviors:
- Strips comments (optionally keeping those a predicate accepts)
- Strips <script> and <style> blocks including their content
- Drops tags outside the allow-list; enclosed text is kept
- Drops attributes not allowed on the tag or globally (`*`)
- Drops URI attributes whose protocol is not allowed
- Rebuilds `style` from its valid declarations only
- Re-encodes surviving attribute values
- Emits self-closing tags as `<tag ... />`

This is a single-pass tag scanner, not an HTML parser. Nesting and
balance are not checked.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from storyblok.domain.html import (
    build_style_string,
    decode,
    encode_attribute,
    parse_style_string,
)
from storyblok.domain.options import SanitizerOptions

CommentFilter = Callable[[str], bool]

# --- Patterns ---

COMMENT_PATTERN = re.compile(r"<!--[\s\S]*?-->")
SCRIPT_PATTERN = re.compile(r"<script\b[^>]*>[\s\S]*?</script\s*>", re.IGNORECASE)
STYLE_PATTERN = re.compile(r"<style\b[^>]*>[\s\S]*?</style\s*>", re.IGNORECASE)

# Quoted attribute values may contain ">"
TAG_PATTERN = re.compile(
    r"<(/?)([a-zA-Z][a-zA-Z0-9-]*)((?:[^>\"']|\"[^\"]*\"|'[^']*')*)>",
)
ATTR_PATTERN = re.compile(
    r"([a-zA-Z_:][a-zA-Z0-9_:.\-]*)(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'=<>`]+)))?"
)
PROTOCOL_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")

# Removed before the protocol check: "java\tscript:" is javascript:
_URL_IGNORED_CHARS = re.compile(r"[\x00-\x20]")


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse HTML attributes from a tag body; the first occurrence of a name wins."""
    attrs: dict[str, str] = {}
    for match in ATTR_PATTERN.finditer(attr_string):
        name = match.group(1).lower()
        value = match.group(2)
        if value is None:
            value = match.group(3)
        if value is None:
            value = match.group(4) or ""
        attrs.setdefault(name, value)
    return attrs


class HtmlSanitizer:
    """
    Allow-list sanitizer bound to one set of options.

    Instances hold no per-call state and can be shared across threads.
    """

    def __init__(self, options: SanitizerOptions | None = None) -> None:
        self._options = options or SanitizerOptions()

    @property
    def options(self) -> SanitizerOptions:
        return self._options

    def sanitize(self, html: str | None, keep_comment: CommentFilter | None = None) -> str:
        """
        Sanitize an HTML string.

        Args:
            html: Markup to clean. None or empty yields "".
            keep_comment: Comments for which this returns True survive
                comment stripping.
        """
        if not html:
            return ""

        if self._options.strip_comments:
            html = COMMENT_PATTERN.sub(
                lambda m: m.group(0) if keep_comment and keep_comment(m.group(0)) else "",
                html,
            )
        html = SCRIPT_PATTERN.sub("", html)
        html = STYLE_PATTERN.sub("", html)

        return TAG_PATTERN.sub(self._process_tag, html)

    # --- Tags ---

    def _process_tag(self, match: re.Match[str]) -> str:
        is_closing = bool(match.group(1))
        tag_name = match.group(2).lower()

        if tag_name not in self._options.allowed_tags:
            return ""

        is_self_closing = tag_name in self._options.self_closing_tags
        if is_closing:
            return "" if is_self_closing else f"</{tag_name}>"

        attr_string = match.group(3).rstrip()
        if attr_string.endswith("/"):
            attr_string = attr_string[:-1]

        parts = [
            f'{name}="{encode_attribute(value)}"'
            for name, value in self._filter_attributes(tag_name, attr_string).items()
        ]
        body = f"{tag_name} {' '.join(parts)}" if parts else tag_name
        return f"<{body} />" if is_self_closing else f"<{body}>"

    def _allowed_attributes(self, tag_name: str) -> frozenset[str]:
        allowed = self._options.allowed_attributes
        return allowed.get(tag_name, frozenset()) | allowed.get("*", frozenset())

    def _filter_attributes(self, tag_name: str, attr_string: str) -> dict[str, str]:
        allowed = self._allowed_attributes(tag_name)
        filtered: dict[str, str] = {}
        for name, raw_value in parse_attributes(attr_string).items():
            if name not in allowed:
                continue
            value = decode(raw_value)
            if name in self._options.uri_attributes and not self._is_allowed_uri(name, value):
                continue
            if name == "style":
                value = build_style_string(parse_style_string(value))
                if not value:
                    continue
            filtered[name] = value
        return filtered

    # --- URIs ---

    def _is_allowed_uri(self, name: str, value: str) -> bool:
        if name == "srcset":
            candidates = [c.strip().split(" ", 1)[0] for c in value.split(",") if c.strip()]
            return all(self._is_allowed_url(candidate) for candidate in candidates)
        return self._is_allowed_url(value)

    def _is_allowed_url(self, url: str) -> bool:
        """Relative URLs pass; absolute ones need an allowed protocol."""
        compact = _URL_IGNORED_CHARS.sub("", url)
        if compact.startswith("//"):
            protocols = self._options.allowed_protocols
            return "http" in protocols or "https" in protocols
        match = PROTOCOL_PATTERN.match(compact)
        if match is None:
            return True
        return match.group(1).lower() in self._options.allowed_protocols


def sanitize_html(
    html: str | None,
    options: SanitizerOptions | None = None,
    keep_comment: CommentFilter | None = None,
) -> str:
    """Sanitize `html` with a one-off sanitizer."""
    return HtmlSanitizer(options).sanitize(html, keep_comment)
