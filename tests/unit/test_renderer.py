"""
Tests for the rich text renderer and the richtext component entry points.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest
from pydantic import ValidationError

from storyblok.components.richtext import (
    RenderRichTextInput,
    RichTextContent,
    RichTextRenderer,
    SanitizeHtmlInput,
    create_rich_text_renderer,
    run,
    run_render,
    run_sanitize,
)
from storyblok.core.services.component_resolver import BaseComponentResolver
from storyblok.domain.options import (
    ImageOptimizationOptions,
    RichTextOptions,
    SrcSetEntry,
)
from storyblok.domain.policy import InvalidNodeError, InvalidNodeStrategy

CDN_IMAGE = "https://a.storyblok.com/f/1/800x600/abc/photo.jpg"

# --- Fixtures ---


@pytest.fixture
def renderer() -> RichTextRenderer:
    return RichTextRenderer()


def doc(*content: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "content": list(content)}


def paragraph(*content: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "content": list(content)}


def text(value: str, *marks: dict[str, Any]) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": value}
    if marks:
        node["marks"] = list(marks)
    return node


def strategy(value: InvalidNodeStrategy) -> RichTextOptions:
    return RichTextOptions(invalid_node_handling=value)


class StaticResolver:
    def __init__(self, html: str) -> None:
        self.html = html

    def supports_component(self, component_type: str) -> bool:
        return component_type == "widget"

    def resolve_component(self, component_type: str, props: Mapping[str, Any]) -> str:
        return self.html


# --- Rendering ---


class TestRender:
    """End-to-end rendering."""

    def test_bold_paragraph(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("Hello", {"type": "bold"})))
        assert renderer.render(content) == "<p><strong>Hello</strong></p>"

    def test_bold_then_link_nests_link_outermost(self, renderer: RichTextRenderer) -> None:
        content = doc(
            paragraph(
                text(
                    "Go",
                    {"type": "bold"},
                    {"type": "link", "attrs": {"href": "https://example.com"}},
                )
            )
        )
        assert renderer.render(content) == (
            '<p><a href="https://example.com"><strong>Go</strong></a></p>'
        )

    def test_text_encoded_once(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("Fish & <chips>", {"type": "italic"})))
        assert renderer.render(content) == "<p><em>Fish &amp; &lt;chips&gt;</em></p>"

    def test_heading_and_rule(self, renderer: RichTextRenderer) -> None:
        content = doc(
            {"type": "heading", "attrs": {"level": 3}, "content": [text("Title")]},
            {"type": "horizontal_rule"},
        )
        assert renderer.render(content) == "<h3>Title</h3><hr />"

    def test_hard_break_inside_paragraph(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("a"), {"type": "hard_break"}, text("b")))
        assert renderer.render(content) == "<p>a<br />b</p>"

    def test_single_node_without_document(self, renderer: RichTextRenderer) -> None:
        assert renderer.render(paragraph(text("x"))) == "<p>x</p>"

    def test_model_input(self, renderer: RichTextRenderer) -> None:
        content = RichTextContent.model_validate(doc(paragraph(text("m"))))
        assert renderer.render(content) == "<p>m</p>"

    def test_none_and_blank_render_empty(self, renderer: RichTextRenderer) -> None:
        assert renderer.render(None) == ""
        assert renderer.render({}) == ""
        assert renderer.render({"type": "doc", "content": []}) == ""

    def test_unknown_fields_ignored(self, renderer: RichTextRenderer) -> None:
        content = doc({"type": "paragraph", "uid": "1", "content": [text("a")]})
        assert renderer.render(content) == "<p>a</p>"

    def test_output_is_sanitized(self, renderer: RichTextRenderer) -> None:
        content = doc(
            paragraph(text("x", {"type": "link", "attrs": {"href": "javascript:alert(1)"}}))
        )
        assert renderer.render(content) == "<p><a>x</a></p>"

    def test_styled_mark(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("c", {"type": "styled", "attrs": {"color": "red"}})))
        assert renderer.render(content) == '<p><span style="color: red">c</span></p>'


# --- Invalid Node Policy ---


class TestInvalidNodePolicy:
    """The four strategies end to end."""

    @pytest.fixture
    def content(self) -> dict[str, Any]:
        return doc(paragraph(text("a"), {"type": "sparkle", "text": "raw"}))

    def test_remove(self, renderer: RichTextRenderer, content: dict[str, Any]) -> None:
        assert renderer.render(content, strategy(InvalidNodeStrategy.REMOVE)) == "<p>a</p>"

    def test_replace_survives_sanitizer(
        self, renderer: RichTextRenderer, content: dict[str, Any]
    ) -> None:
        assert renderer.render(content, strategy(InvalidNodeStrategy.REPLACE)) == (
            "<p>a<!-- Invalid node of type 'sparkle' --></p>"
        )

    def test_keep(self, renderer: RichTextRenderer, content: dict[str, Any]) -> None:
        assert renderer.render(content, strategy(InvalidNodeStrategy.KEEP)) == "<p>araw</p>"

    def test_throw(self, renderer: RichTextRenderer, content: dict[str, Any]) -> None:
        with pytest.raises(InvalidNodeError):
            renderer.render(content, strategy(InvalidNodeStrategy.THROW))

    def test_unknown_mark_ignored(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("a", {"type": "sparkle"})))
        assert renderer.render(content) == "<p>a</p>"

    def test_unknown_mark_throws(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("a", {"type": "sparkle"})))
        with pytest.raises(InvalidNodeError) as exc_info:
            renderer.render(content, strategy(InvalidNodeStrategy.THROW))
        assert exc_info.value.node_type == "mark:sparkle"

    def test_malformed_content_replaced(self, renderer: RichTextRenderer) -> None:
        content = {"type": "doc", "content": "not a list"}
        assert renderer.render(content, strategy(InvalidNodeStrategy.REPLACE)).startswith(
            "<!-- Invalid node of type 'doc'"
        )

    def test_keep_encodes_markup(self, renderer: RichTextRenderer) -> None:
        raw = '<a href="https://evil.example">click</a> & 1 < 2'
        content = doc(paragraph(text("a"), {"type": "sparkle", "text": raw}))
        assert renderer.render(content, strategy(InvalidNodeStrategy.KEEP)) == (
            "<p>a&lt;a href=&quot;https://evil.example&quot;&gt;click&lt;/a&gt;"
            " &amp; 1 &lt; 2</p>"
        )

    def test_malformed_text_dropped_beside_valid_sibling(
        self, renderer: RichTextRenderer
    ) -> None:
        content = doc(paragraph(text("ok"), {"type": "text", "text": 5}))
        assert renderer.render(content) == "<p>ok</p>"

    def test_malformed_mark_dropped_beside_valid_sibling(
        self, renderer: RichTextRenderer
    ) -> None:
        content = doc(
            paragraph(text("ok")),
            paragraph(text("x", {"type": "bold", "attrs": "oops"}), text("y")),
        )
        assert renderer.render(content) == "<p>ok</p><p>y</p>"

    def test_malformed_node_replaced_in_place(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("ok")), paragraph({"type": "text", "text": 5}))
        html = renderer.render(content, strategy(InvalidNodeStrategy.REPLACE))
        assert html.startswith("<p>ok</p><p><!-- Invalid node of type 'text': ")
        assert html.endswith(" --></p>")

    def test_malformed_node_throws(self, renderer: RichTextRenderer) -> None:
        content = doc(paragraph(text("ok")), paragraph({"type": "text", "text": 5}))
        with pytest.raises(ValidationError):
            renderer.render(content, strategy(InvalidNodeStrategy.THROW))


# --- Images ---


class TestImages:
    """Image optimization through the renderer."""

    def test_optimized_image_with_srcset(self) -> None:
        renderer = RichTextRenderer(
            RichTextOptions(
                optimize_images=True,
                image_options=ImageOptimizationOptions(
                    width=400,
                    srcset=(SrcSetEntry(400), SrcSetEntry(800)),
                ),
            )
        )
        content = doc(paragraph({"type": "image", "attrs": {"src": CDN_IMAGE, "alt": "p"}}))
        html = renderer.render(content)
        assert f'src="{CDN_IMAGE}/m/400x0/"' in html
        srcset = re.search(r'srcset="([^"]*)"', html)
        assert srcset is not None
        assert len(re.findall(r" \d+w", srcset.group(1))) == 2

    def test_emoji_survives_sanitizer(self, renderer: RichTextRenderer) -> None:
        content = doc(
            paragraph(
                {
                    "type": "emoji",
                    "attrs": {"name": "smile", "emoji": "😄", "fallbackImage": "/smile.png"},
                }
            )
        )
        html = renderer.render(content)
        assert 'data-type="emoji"' in html
        assert 'data-name="smile"' in html
        assert '<img src="/smile.png" alt="smile"' in html


# --- Keyed Rendering ---


class TestKeyedRendering:
    """Synthetic keys."""

    def test_keys_survive_sanitizer(self) -> None:
        renderer = RichTextRenderer(RichTextOptions(keyed_resolvers=True))
        html = renderer.render(doc(paragraph(text("a", {"type": "bold"}))))
        assert html == '<p key="p-2"><strong key="strong-1">a</strong></p>'

    def test_keys_unique_across_concurrent_renders(self) -> None:
        renderer = RichTextRenderer(RichTextOptions(keyed_resolvers=True))
        content = doc(paragraph(text("a", {"type": "bold"})), paragraph(text("b")))

        with ThreadPoolExecutor(max_workers=8) as executor:
            outputs = list(executor.map(lambda _: renderer.render(content), range(50)))

        keys = [key for html in outputs for key in re.findall(r'key="([^"]+)"', html)]
        assert len(keys) == 150
        assert len(set(keys)) == len(keys)


# --- Components ---


class TestComponents:
    """Component resolvers through the renderer."""

    def test_registered_resolver(self) -> None:
        resolver = BaseComponentResolver()
        resolver.register_component("card", lambda props: f"<p>{props['title']}</p>")
        renderer = create_rich_text_renderer(component_resolvers=[resolver])
        content = doc({"type": "blok", "attrs": {"body": [{"component": "card", "title": "T"}]}})
        assert renderer.render(content) == "<p>T</p>"

    def test_component_output_is_sanitized(self, renderer: RichTextRenderer) -> None:
        renderer.add_component_resolver(StaticResolver("<p onclick='x()'>w</p><script>1</script>"))
        content = doc({"type": "blok", "attrs": {"component": "widget"}})
        assert renderer.render(content) == "<p>w</p>"

    def test_resolver_added_after_construction(self) -> None:
        renderer = RichTextRenderer()
        renderer.add_component_resolver(StaticResolver("<p>late</p>"))
        content = doc({"type": "blok", "attrs": {"component": "widget"}})
        assert renderer.render(content) == "<p>late</p>"


# --- Component Entry Points ---


class TestRunRender:
    """run_render / run_sanitize / run."""

    def test_success(self) -> None:
        output = run_render(RenderRichTextInput(content=doc(paragraph(text("a")))))
        assert output.success is True
        assert output.html == "<p>a</p>"
        assert output.errors == []

    def test_throw_reported_as_error(self) -> None:
        inp = RenderRichTextInput(
            content=doc({"type": "sparkle"}),
            options=strategy(InvalidNodeStrategy.THROW),
        )
        output = run_render(inp)
        assert output.success is False
        assert output.errors[0].code == "invalid_node"
        assert output.errors[0].node_type == "sparkle"

    def test_rules_port_supplies_options(self) -> None:
        class Rules:
            def to_richtext_options(self) -> RichTextOptions:
                return strategy(InvalidNodeStrategy.REPLACE)

        output = run_render(RenderRichTextInput(content=doc({"type": "sparkle"})), rules=Rules())
        assert output.html == "<!-- Invalid node of type 'sparkle' -->"

    def test_run_sanitize(self) -> None:
        output = run_sanitize(SanitizeHtmlInput(html="<p onclick='x'>a</p>"))
        assert output.html == "<p>a</p>"

    def test_run_dispatches(self) -> None:
        assert run(SanitizeHtmlInput(html="<b>a</b>")).html == "<b>a</b>"

    def test_run_rejects_unknown_input(self) -> None:
        with pytest.raises(ValueError):
            run("nope")  # type: ignore[arg-type]
