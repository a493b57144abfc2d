"""
Richtext component - rich text rendering and sanitizing.
"""

from ._impl import (
    RichTextRenderer,
    create_rich_text_renderer,
    map_document,
    map_child,
    map_node,
)
from .component import (
    run,
    run_render,
    run_sanitize,
)
from .models import (
    RenderError,
    RenderOutput,
    RenderRichTextInput,
    RichTextContent,
    RichTextMark,
    SanitizeHtmlInput,
    SanitizeOutput,
)
from .ports import ComponentResolverPort, RulesPort

__all__ = [
    # Entry points
    "run",
    "run_render",
    "run_sanitize",
    # Input models
    "RenderRichTextInput",
    "SanitizeHtmlInput",
    "RichTextContent",
    "RichTextMark",
    # Output models
    "RenderError",
    "RenderOutput",
    "SanitizeOutput",
    # Ports
    "ComponentResolverPort",
    "RulesPort",
    # Renderer
    "RichTextRenderer",
    "create_rich_text_renderer",
    "map_document",
    "map_child",
    "map_node",
]
