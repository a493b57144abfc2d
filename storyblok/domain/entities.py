"""
Rich text document model.

Immutable node tree built fresh for every render call. Resolvers only read
nodes and emit HTML strings; a mark carrying accumulated inner HTML is a new
MarkNode built with `with_text`, never a mutated one.

Key behaviors:
- Node kinds are a closed enum; unrecognized type strings map to UNKNOWN
  and keep their raw name for the invalid-node policy
- Mark types are a closed enum; unparsable names raise ValueError
- Attribute bags are read through typed accessors that fall back to a
  default when the stored value has the wrong shape
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

# --- Attribute Values ---

AttrScalar = Union[str, int, float, bool, None]
AttrValue = Union[AttrScalar, list["AttrValue"], dict[str, "AttrValue"]]
Attrs = Mapping[str, AttrValue]

EMPTY_ATTRS: Attrs = MappingProxyType({})


def freeze_attrs(attrs: Mapping[str, Any] | None) -> Attrs:
    """Copy an attribute bag into a read-only mapping."""
    if not attrs:
        return EMPTY_ATTRS
    return MappingProxyType(dict(attrs))


def attr_str(attrs: Attrs | None, key: str, default: str | None = None) -> str | None:
    """
    Read a scalar attribute as a string.

    Booleans render as "true"/"false"; lists, dicts and None yield the default.
    """
    if not attrs or key not in attrs:
        return default
    value = attrs[key]
    if value is None or isinstance(value, (list, dict)):
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def attr_int(attrs: Attrs | None, key: str, default: int) -> int:
    """Read an integer attribute; numeric strings are accepted."""
    if not attrs or key not in attrs:
        return default
    value = attrs[key]
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def attr_bool(attrs: Attrs | None, key: str, default: bool = False) -> bool:
    """Read a boolean attribute; "true"/"false" strings are accepted."""
    if not attrs or key not in attrs:
        return default
    value = attrs[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return default


# --- Node Kinds ---


def _normalize_type_name(name: str) -> str:
    """Lowercase and strip separators so bullet_list, bulletList and BulletList agree."""
    return re.sub(r"[_\-\s]", "", name).lower()


class NodeKind(str, Enum):
    """Recognized rich text node kinds."""

    DOCUMENT = "doc"
    TEXT = "text"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    QUOTE = "blockquote"
    CODE_BLOCK = "code_block"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    HORIZONTAL_RULE = "horizontal_rule"
    HARD_BREAK = "hard_break"
    IMAGE = "image"
    EMOJI = "emoji"
    COMPONENT = "blok"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, type_name: str | None) -> NodeKind:
        """Map a raw type string to a node kind (UNKNOWN if unrecognized)."""
        if not type_name:
            return cls.UNKNOWN
        return _NODE_ALIASES.get(_normalize_type_name(type_name), cls.UNKNOWN)


_NODE_ALIASES: dict[str, NodeKind] = {
    "doc": NodeKind.DOCUMENT,
    "document": NodeKind.DOCUMENT,
    "text": NodeKind.TEXT,
    "paragraph": NodeKind.PARAGRAPH,
    "heading": NodeKind.HEADING,
    "blockquote": NodeKind.QUOTE,
    "quote": NodeKind.QUOTE,
    "codeblock": NodeKind.CODE_BLOCK,
    "bulletlist": NodeKind.BULLET_LIST,
    "orderedlist": NodeKind.ORDERED_LIST,
    "listitem": NodeKind.LIST_ITEM,
    "horizontalrule": NodeKind.HORIZONTAL_RULE,
    "hardbreak": NodeKind.HARD_BREAK,
    "image": NodeKind.IMAGE,
    "emoji": NodeKind.EMOJI,
    "blok": NodeKind.COMPONENT,
    "component": NodeKind.COMPONENT,
}


# --- Mark Types ---


class MarkType(str, Enum):
    """Inline formatting marks."""

    BOLD = "bold"
    STRONG = "strong"
    STRIKE = "strike"
    UNDERLINE = "underline"
    ITALIC = "italic"
    CODE = "code"
    LINK = "link"
    ANCHOR = "anchor"
    STYLED = "styled"
    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"
    TEXT_STYLE = "textstyle"
    HIGHLIGHT = "highlight"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, type_name: str | None) -> MarkType:
        """
        Map a raw mark name to a mark type.

        Raises ValueError for empty or unrecognized names.
        """
        normalized = _normalize_type_name(type_name or "")
        for member in cls:
            if member is not cls.UNKNOWN and member.value == normalized:
                return member
        raise ValueError(f"Unknown mark type: {type_name!r}")


class LinkType(str, Enum):
    """Link targets carried by link marks."""

    URL = "url"
    STORY = "story"
    ASSET = "asset"
    EMAIL = "email"

    @classmethod
    def parse(cls, value: str | None) -> LinkType | None:
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


# --- Nodes ---


@dataclass(frozen=True)
class MarkNode:
    """
    A mark applied to a text run.

    `text` holds the HTML the mark wraps: the encoded text for the innermost
    mark, or the output of the previously applied mark.
    """

    mark_type: MarkType
    type_name: str
    attrs: Attrs = field(default_factory=lambda: EMPTY_ATTRS)
    text: str = ""
    link_type: LinkType | None = None

    def with_text(self, text: str) -> MarkNode:
        """Return a copy carrying different inner HTML."""
        return replace(self, text=text)


@dataclass(frozen=True)
class RichTextNode:
    """
    A node in the rich text document tree.

    Leaf text nodes carry `text` (and optionally `marks`); every other kind
    carries ordered `content`. `error` is set on UNKNOWN nodes standing in
    for raw content that failed validation.
    """

    kind: NodeKind
    type_name: str
    attrs: Attrs = field(default_factory=lambda: EMPTY_ATTRS)
    content: tuple[RichTextNode, ...] = ()
    text: str | None = None
    marks: tuple[MarkNode, ...] = ()
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when there are neither children nor text."""
        return not self.content and not self.text


def document(*children: RichTextNode) -> RichTextNode:
    """Build a synthetic document root."""
    return RichTextNode(kind=NodeKind.DOCUMENT, type_name=NodeKind.DOCUMENT.value, content=children)
