"""
Tests for the allow-list HTML sanitizer.
"""

from __future__ import annotations

import pytest

from storyblok.core.services.sanitizer import HtmlSanitizer, parse_attributes, sanitize_html
from storyblok.domain.options import SanitizerOptions, build_sanitizer_options
from storyblok.domain.policy import is_placeholder_comment


@pytest.fixture
def sanitizer() -> HtmlSanitizer:
    return HtmlSanitizer()


class TestTags:
    """Tag allow-list."""

    def test_allowed_markup_unchanged(self, sanitizer: HtmlSanitizer) -> None:
        html = '<p>Hi <strong>there</strong> <a href="https://example.com">x</a></p>'
        assert sanitizer.sanitize(html) == html

    def test_disallowed_tag_dropped_text_kept(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize("<div><p>a</p></div>") == "<p>a</p>"

    def test_unknown_tag_stripped(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize("<foo>text</foo>") == "text"
        assert sanitizer.sanitize("<script>alert(1)</script>") == ""

    def test_script_and_style_removed_with_content(self, sanitizer: HtmlSanitizer) -> None:
        html = "<p>a</p><script>alert(1)</script><STYLE>p{}</STYLE><p>b</p>"
        assert sanitizer.sanitize(html) == "<p>a</p><p>b</p>"

    def test_self_closing_normalized(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<p>a<br>b<img src="/x.png"></p>') == (
            '<p>a<br />b<img src="/x.png" /></p>'
        )

    def test_tag_names_lowercased(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize("<P>a</P>") == "<p>a</p>"

    def test_empty(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize("") == ""
        assert sanitizer.sanitize(None) == ""


class TestAttributes:
    """Attribute allow-list and URI checks."""

    def test_event_handlers_dropped(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<p onclick="evil()" class="c">a</p>') == '<p class="c">a</p>'

    def test_attribute_not_allowed_on_tag(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<p href="/x">a</p>') == "<p>a</p>"

    def test_javascript_href_dropped(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"

    def test_obfuscated_javascript_dropped(self, sanitizer: HtmlSanitizer) -> None:
        html = '<a href="java&#x09;script:alert(1)">x</a>'
        assert sanitizer.sanitize(html) == "<a>x</a>"

    def test_relative_and_protocol_relative_urls(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<a href="/path">x</a>') == '<a href="/path">x</a>'
        assert sanitizer.sanitize('<a href="//cdn.example/x">x</a>') == (
            '<a href="//cdn.example/x">x</a>'
        )

    def test_mailto_allowed(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<a href="mailto:a@b.c">x</a>') == (
            '<a href="mailto:a@b.c">x</a>'
        )

    def test_srcset_checked_per_candidate(self, sanitizer: HtmlSanitizer) -> None:
        html = '<img srcset="/a.png 1x, javascript:x 2x">'
        assert sanitizer.sanitize(html) == "<img />"

    def test_values_re_encoded(self, sanitizer: HtmlSanitizer) -> None:
        html = "<p title='a \"b\" &amp; c'>x</p>"
        assert sanitizer.sanitize(html) == '<p title="a &quot;b&quot; &amp; c">x</p>'

    def test_quoted_greater_than(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<p title="a > b">x</p>') == '<p title="a &gt; b">x</p>'

    def test_style_keeps_valid_declarations(self, sanitizer: HtmlSanitizer) -> None:
        html = '<span style="color: red; background: url(javascript:x); font-size: 12px">a</span>'
        assert sanitizer.sanitize(html) == '<span style="color: red; font-size: 12px">a</span>'

    def test_style_without_valid_declarations_dropped(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize('<span style="x:url(javascript:y)">a</span>') == "<span>a</span>"

    def test_custom_allow_lists(self) -> None:
        options = build_sanitizer_options(
            allowed_tags=frozenset(["DIV"]),
            allowed_attributes={"div": frozenset(["Data-X"])},
        )
        assert sanitize_html('<div data-x="1" id="a"><p>b</p></div>', options) == (
            '<div data-x="1">b</div>'
        )

    def test_global_attribute(self) -> None:
        options = SanitizerOptions().with_global_attribute("key")
        assert sanitize_html('<p key="p-1">a</p>', options) == '<p key="p-1">a</p>'
        assert sanitize_html('<p key="p-1">a</p>') == "<p>a</p>"

    def test_parse_attributes_first_wins(self) -> None:
        assert parse_attributes(' a="1" b=2 a="3" c') == {"a": "1", "b": "2", "c": ""}


class TestComments:
    """Comment handling."""

    def test_comments_stripped(self, sanitizer: HtmlSanitizer) -> None:
        assert sanitizer.sanitize("<p>a<!-- hidden -->b</p>") == "<p>ab</p>"

    def test_comment_filter_keeps_placeholders(self, sanitizer: HtmlSanitizer) -> None:
        html = "<p>a</p><!-- Invalid node of type 'x' --><!-- other -->"
        assert sanitizer.sanitize(html, keep_comment=is_placeholder_comment) == (
            "<p>a</p><!-- Invalid node of type 'x' -->"
        )

    def test_comments_kept_when_not_stripping(self) -> None:
        options = SanitizerOptions(strip_comments=False)
        assert sanitize_html("<p>a<!-- c --></p>", options) == "<p>a<!-- c --></p>"
