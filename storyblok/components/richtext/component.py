"""
Richtext component - rich text rendering and HTML sanitizing.

Invariants:
- Output HTML always passes the sanitizer
- Marks apply innermost-first in document order
- Text is encoded exactly once
- Only the THROW strategy lets a render fail
"""

from __future__ import annotations

from storyblok.core.services.sanitizer import sanitize_html
from storyblok.domain.options import DEFAULT_OPTIONS, RichTextOptions
from storyblok.domain.policy import InvalidNodeError

from ._impl import RichTextRenderer
from .models import (
    RenderError,
    RenderOutput,
    RenderRichTextInput,
    SanitizeHtmlInput,
    SanitizeOutput,
)
from .ports import RulesPort


def _build_options(rules: RulesPort | None) -> RichTextOptions:
    """Build render options from the rules port."""
    if rules is None:
        return DEFAULT_OPTIONS
    return rules.to_richtext_options()


# --- Component Entry Points ---


def run_render(
    inp: RenderRichTextInput,
    *,
    rules: RulesPort | None = None,
    renderer: RichTextRenderer | None = None,
) -> RenderOutput:
    """
    Render rich text content to sanitized HTML.

    Args:
        inp: Input containing the content and optional per-call options.
        rules: Optional rules port for configuration.
        renderer: Optional shared renderer (keeps registered component
            resolvers and the key counter).

    Returns:
        RenderOutput; success is False when a THROW policy aborted the render.
    """
    options = inp.options or _build_options(rules)
    renderer = renderer or RichTextRenderer(options)

    try:
        html = renderer.render(inp.content, options)
    except InvalidNodeError as e:
        return RenderOutput(
            html="",
            errors=[RenderError(code="invalid_node", message=str(e), node_type=e.node_type)],
            success=False,
        )
    except ValueError as e:
        return RenderOutput(
            html="",
            errors=[RenderError(code="invalid_content", message=str(e))],
            success=False,
        )

    return RenderOutput(html=html, errors=[], success=True)


def run_sanitize(
    inp: SanitizeHtmlInput,
    *,
    rules: RulesPort | None = None,
) -> SanitizeOutput:
    """
    Sanitize an HTML fragment with the allow-lists.

    Args:
        inp: Input containing the HTML and optional sanitizer options.
        rules: Optional rules port for configuration.

    Returns:
        SanitizeOutput with the cleaned HTML.
    """
    sanitizer_options = inp.options or _build_options(rules).effective_sanitizer_options()
    return SanitizeOutput(html=sanitize_html(inp.html, sanitizer_options), success=True)


def run(
    inp: RenderRichTextInput | SanitizeHtmlInput,
    *,
    rules: RulesPort | None = None,
) -> RenderOutput | SanitizeOutput:
    """
    Main entry point for the richtext component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, RenderRichTextInput):
        return run_render(inp, rules=rules)
    elif isinstance(inp, SanitizeHtmlInput):
        return run_sanitize(inp, rules=rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
