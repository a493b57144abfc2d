"""
Invalid node policy.

Decides what an unrecognized node, or a node whose resolution failed,
contributes to the rendered document.
"""

from __future__ import annotations

import re
from enum import Enum

from storyblok.domain.html import encode


class InvalidNodeStrategy(str, Enum):
    """How invalid nodes are handled during rendering."""

    REMOVE = "remove"
    REPLACE = "replace"
    KEEP = "keep"
    THROW = "throw"


class InvalidNodeError(ValueError):
    """Raised for an invalid node when the strategy is THROW."""

    def __init__(self, node_type: str, message: str | None = None) -> None:
        self.node_type = node_type
        super().__init__(message or f"Invalid node type: {node_type}")


PLACEHOLDER_PATTERN = re.compile(r"^<!-- Invalid node of type '[^'<>]*'(?:: [^<>]*)? -->$")


def _comment_safe(value: str) -> str:
    # "--" may not appear inside a comment body
    return re.sub(r"-{2,}", "-", encode(value))


def placeholder_comment(node_type: str, error: BaseException | str | None = None) -> str:
    """HTML comment marking a replaced node."""
    label = f"Invalid node of type '{_comment_safe(node_type)}'"
    if error is not None:
        return f"<!-- {label}: {_comment_safe(str(error))} -->"
    return f"<!-- {label} -->"


def is_placeholder_comment(comment: str) -> bool:
    """True if `comment` is a marker produced by placeholder_comment."""
    return PLACEHOLDER_PATTERN.match(comment) is not None


def handle_invalid_node(
    strategy: InvalidNodeStrategy,
    node_type: str,
    text: str | None = None,
    error: BaseException | str | None = None,
) -> str:
    """
    Apply the invalid node strategy.

    KEEP returns the node's own text, encoded, without its children or
    markup.

    Raises:
        InvalidNodeError: When strategy is THROW (chained to `error`).
    """
    if strategy is InvalidNodeStrategy.REMOVE:
        return ""
    if strategy is InvalidNodeStrategy.REPLACE:
        return placeholder_comment(node_type or "unknown", error)
    if strategy is InvalidNodeStrategy.KEEP:
        return encode(text)
    cause = error if isinstance(error, BaseException) else None
    raise InvalidNodeError(node_type or "unknown") from cause
