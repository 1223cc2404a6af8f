"""Tests for pagedigest.extractors.text."""

from __future__ import annotations

from pagedigest.extractors.text import markup_to_text, render_text


class TestMarkupToText:
    def test_structured_rendering(self):
        markup = "".join(f"<p>Paragraph {i}</p>" for i in range(6))
        text = markup_to_text(markup)
        assert text == "\n\n".join(f"Paragraph {i}" for i in range(6))

    def test_headings_and_items_count_as_fragments(self):
        markup = "<h2>Title</h2><p>One</p><ul><li>a</li><li>b</li><li>c</li></ul><p>Two</p>"
        assert markup_to_text(markup).split("\n\n") == ["Title", "One", "a", "b", "c", "Two"]

    def test_flat_rendering_collapses_whitespace(self):
        markup = "<div>  Some   text\n\n\n  across <b>lines</b>  </div>"
        assert markup_to_text(markup) == "Some text across lines"

    def test_five_fragments_stay_flat(self):
        markup = "".join(f"<p>P{i}</p>" for i in range(5))
        assert "\n" not in markup_to_text(markup)

    def test_empty_fragments_not_counted(self):
        markup = "<p></p>" * 10 + "<p>Only</p>"
        assert markup_to_text(markup) == "Only"

    def test_scripts_removed(self):
        markup = "<p>Visible</p><script>hidden()</script><noscript>enable js</noscript>"
        assert markup_to_text(markup) == "Visible"

    def test_empty_markup(self):
        assert markup_to_text("") == ""
        assert markup_to_text("   ") == ""


class TestRenderText:
    def test_entry_content_paragraph(self):
        html = (
            '<html><body><div class="entry-content"><p>Hello world, this is a long article '
            "about testing systems.</p></div></body></html>"
        )
        assert render_text(html, "https://example.com/post") == (
            "Hello world, this is a long article about testing systems."
        )

    def test_article_fixture(self, article_html):
        text = render_text(article_html, "https://example.com/blog/testing-systems")
        assert "\n\n" in text
        assert "linearizability checker" in text
        assert "Terms of service" not in text

    def test_empty_document(self):
        assert render_text("", "https://example.com/") == ""
