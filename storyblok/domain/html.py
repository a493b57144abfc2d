"""
HTML and attribute utilities.

Entity encoding, attribute and style string building, and a few
structural helpers shared by the resolvers and the sanitizer.
"""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from typing import Any

from storyblok.domain.buffers import DEFAULT_POOL, BufferPool

# --- Encoding ---

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

_NEEDS_ESCAPE = re.compile(r"[&<>\"']")


def encode(text: str | None) -> str:
    """Encode text for use as HTML content."""
    if not text:
        return ""
    if _NEEDS_ESCAPE.search(text) is None:
        return text
    return text.translate(_ESCAPES)


def encode_attribute(value: str | None) -> str:
    """Encode a value for use inside a double-quoted attribute."""
    return encode(value)


def decode(text: str | None) -> str:
    """Decode HTML entities back to text."""
    if not text:
        return ""
    return html.unescape(text)


def to_attribute_value(value: Any) -> str:
    """Render a scalar attribute value as a string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# --- Attributes ---

_ATTRIBUTE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\-]")


def sanitize_attribute_name(name: str) -> str:
    """Keep only letters, digits and hyphens, lowercased."""
    return _ATTRIBUTE_NAME_CHARS.sub("", name).lower()


def format_attributes(
    attrs: Mapping[str, Any] | None,
    pool: BufferPool = DEFAULT_POOL,
) -> str:
    """
    Format attributes as `key="value"` pairs separated by single spaces.

    Keys are reduced to letters, digits and hyphens; values are
    attribute-encoded. Keys that sanitize to nothing are skipped.
    """
    if not attrs:
        return ""

    with pool.borrow() as buffer:
        first = True
        for key, value in attrs.items():
            name = sanitize_attribute_name(key) if key else ""
            if not name:
                continue
            if not first:
                buffer.write(" ")
            first = False
            buffer.write(name)
            buffer.write('="')
            buffer.write(encode_attribute(to_attribute_value(value)))
            buffer.write('"')
        return buffer.getvalue()


def merge_attributes(*attr_sets: Mapping[str, Any] | None) -> dict[str, str]:
    """
    Merge attribute sets; later sets win on case-insensitive key collisions.

    The first spelling of a key is kept, its value is overridden.
    """
    result: dict[str, str] = {}
    spellings: dict[str, str] = {}
    for attrs in attr_sets:
        if not attrs:
            continue
        for key, value in attrs.items():
            if not key or not key.strip():
                continue
            folded = key.lower()
            name = spellings.setdefault(folded, key)
            result[name] = to_attribute_value(value)
    return result


# --- Styles ---

STYLE_PROPERTY_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
STYLE_VALUE_PATTERN = re.compile(r"^[a-zA-Z0-9\-\s.,#%()]+$")

SAFE_STYLE_PROPERTIES = frozenset(
    [
        "color",
        "background-color",
        "font-size",
        "font-weight",
        "font-style",
        "font-family",
        "text-align",
        "text-decoration",
        "margin",
        "padding",
        "border",
        "display",
        "width",
        "height",
        "min-width",
        "min-height",
        "max-width",
        "max-height",
        "line-height",
        "border-radius",
    ]
)


def is_valid_style(name: str, value: str) -> bool:
    """Check a CSS declaration against the property and value patterns."""
    if STYLE_VALUE_PATTERN.match(value) is None:
        return False
    if name.lower() in SAFE_STYLE_PROPERTIES:
        return True
    return STYLE_PROPERTY_PATTERN.match(name) is not None


def build_style_string(
    attrs: Mapping[str, Any] | None,
    pool: BufferPool = DEFAULT_POOL,
) -> str:
    """
    Serialize attributes as CSS declarations.

    Invalid declarations are dropped. Valid ones are joined as
    "name: value" separated by "; ".
    """
    if not attrs:
        return ""

    with pool.borrow() as buffer:
        first = True
        for name, raw_value in attrs.items():
            if raw_value is None or isinstance(raw_value, (list, dict)):
                continue
            value = to_attribute_value(raw_value)
            if not name or not name.strip() or not value.strip():
                continue
            if not is_valid_style(name, value):
                continue
            if not first:
                buffer.write("; ")
            first = False
            buffer.write(name.lower())
            buffer.write(": ")
            buffer.write(value)
        return buffer.getvalue()


def parse_style_string(style: str | None) -> dict[str, str]:
    """Parse "a: b; c: d" into a dict, dropping invalid declarations."""
    result: dict[str, str] = {}
    if not style or not style.strip():
        return result

    for declaration in style.split(";"):
        parts = [part for part in declaration.split(":") if part]
        if len(parts) != 2:
            continue
        name = parts[0].strip()
        value = parts[1].strip()
        if not name or not value or not is_valid_style(name, value):
            continue
        result[name] = value
    return result


# --- Tags ---

SELF_CLOSING_TAGS = frozenset(
    [
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    ]
)

_TAG_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def sanitize_tag_name(tag: str | None) -> str:
    """Keep only letters, digits, hyphens and underscores, lowercased."""
    if not tag:
        return ""
    return _TAG_NAME_CHARS.sub("", tag).lower()


def wrap_in_tag(
    content: str,
    tag: str,
    attrs: Mapping[str, Any] | None = None,
    pool: BufferPool = DEFAULT_POOL,
) -> str:
    """Wrap content in an opening and closing tag."""
    tag = sanitize_tag_name(tag)
    attr_string = format_attributes(attrs, pool)
    with pool.borrow() as buffer:
        buffer.write("<")
        buffer.write(tag)
        if attr_string:
            buffer.write(" ")
            buffer.write(attr_string)
        buffer.write(">")
        buffer.write(content)
        buffer.write("</")
        buffer.write(tag)
        buffer.write(">")
        return buffer.getvalue()
