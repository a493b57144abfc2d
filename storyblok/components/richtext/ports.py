"""
Richtext component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from storyblok.core.ports.component import ComponentResolverPort
from storyblok.domain.options import RichTextOptions


class RulesPort(Protocol):
    """Port for reading render configuration."""

    def to_richtext_options(self) -> RichTextOptions:
        """Get render options, sanitizer allow-lists included."""
        ...


__all__ = ["ComponentResolverPort", "RulesPort"]
