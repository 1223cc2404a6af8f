"""Tests for pagedigest.extractors.main_content - the isolation strategy chain."""

from __future__ import annotations

from unittest.mock import patch

from bs4 import BeautifulSoup

from pagedigest.extractors.main_content import (
    check_readability_candidate,
    clean_content,
    extract_main_content,
    isolate_main_content,
    selector_fallback,
)

_PARAGRAPH = (
    "Distributed systems fail in ways that single-process programs never do, and "
    "every one of those failures has to be handled by code that was tested locally. "
)


def _text(markup: str) -> str:
    return BeautifulSoup(markup, "lxml").get_text()


# ---------------------------------------------------------------------------
# Acceptance gate
# ---------------------------------------------------------------------------

class TestReadabilityGate:
    def test_accepts_prose(self):
        markup = f"<div><p>{_PARAGRAPH * 3}</p></div>"
        assert check_readability_candidate(markup) is None

    def test_rejects_short_text(self):
        reason = check_readability_candidate("<div><p>Too short.</p></div>")
        assert reason is not None
        assert "too short" in reason

    def test_rejects_low_text_ratio(self):
        markup = "<div>" + "<span class='x'><i></i></span>" * 200 + f"<p>{_PARAGRAPH}</p></div>"
        reason = check_readability_candidate(markup)
        assert reason is not None
        assert "ratio" in reason

    def test_rejects_many_data_attributes(self):
        spans = "".join(f'<span data-k{i}="v">word </span>' for i in range(12))
        markup = f"<div><p>{_PARAGRAPH * 2}</p>{spans}</div>"
        reason = check_readability_candidate(markup)
        assert reason is not None
        assert "data-*" in reason

    def test_rejects_custom_elements(self):
        widgets = "<site-header-menu>menu</site-header-menu>" * 6
        markup = f"<div><p>{_PARAGRAPH * 2}</p>{widgets}</div>"
        reason = check_readability_candidate(markup)
        assert reason is not None
        assert "custom elements" in reason


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

class TestCleanContent:
    def test_removes_scripts_and_styles(self):
        cleaned = clean_content("<p>Keep</p><script>bad()</script><style>p{}</style>")
        assert "bad()" not in cleaned
        assert "p{}" not in cleaned
        assert "Keep" in cleaned

    def test_removes_ad_blocks(self):
        cleaned = clean_content('<p>Keep</p><div class="ad-banner">Buy now</div>')
        assert "Buy now" not in cleaned

    def test_readability_classes_survive_ad_rule(self):
        cleaned = clean_content('<div class="thread-list readability-styled"><p>Keep this</p></div>')
        assert "Keep this" in cleaned

    def test_removes_popups(self):
        cleaned = clean_content('<p>Keep</p><div class="newsletter-modal">Sign up</div>')
        assert "Sign up" not in cleaned

    def test_removes_chrome(self):
        cleaned = clean_content("<header>Top</header><p>Keep</p><nav>Menu</nav><footer>Bottom</footer>")
        assert "Top" not in cleaned
        assert "Menu" not in cleaned
        assert "Bottom" not in cleaned

    def test_keeps_related_aside(self):
        cleaned = clean_content('<p>Keep</p><aside aria-label="Related articles"><a href="/x">X</a></aside>')
        assert "<aside" in cleaned

    def test_drops_plain_aside(self):
        cleaned = clean_content("<p>Keep</p><aside>Promo</aside>")
        assert "Promo" not in cleaned


# ---------------------------------------------------------------------------
# Selector fallback
# ---------------------------------------------------------------------------

class TestSelectorFallback:
    def test_priority_selector(self):
        html = f"""<html><body><nav>Menu</nav>
        <div id="content"><p>{_PARAGRAPH * 5}</p><div class="sponsor-box">Sponsored</div></div>
        <div class="sidebar">Unrelated sidebar text</div></body></html>"""
        markup = selector_fallback(html)
        text = _text(markup)
        assert "Distributed systems" in text
        assert "Sponsored" not in text
        assert "Unrelated sidebar" not in text
        assert "Menu" not in text

    def test_semantic_tag_when_no_priority_match(self):
        html = f"""<html><body><div class="wrapper"><p>Intro blurb</p>
        <article><p>{_PARAGRAPH * 5}</p></article></div></body></html>"""
        text = _text(selector_fallback(html))
        assert "Distributed systems" in text
        assert "Intro blurb" not in text

    def test_longest_div_with_paragraphs(self):
        html = f"""<html><body><div class="a">short</div>
        <div class="b"><p>{_PARAGRAPH * 6}</p></div></body></html>"""
        text = _text(selector_fallback(html))
        assert "Distributed systems" in text

    def test_body_when_nothing_matches(self):
        html = "<html><body><span>tiny page</span></body></html>"
        assert "tiny page" in _text(selector_fallback(html))


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------

class TestExtractMainContent:
    def test_article_fixture_uses_readability(self, article_html):
        result = extract_main_content(article_html, "https://example.com/blog/testing-systems")
        assert result.method == "readability"
        text = _text(result.html)
        assert "quorum read" in text
        assert "window.analytics" not in text
        assert "inline tracking" not in text

    def test_short_page_falls_back(self):
        html = """<html><body><div class="entry-content">
        <p>Hello world, this is a long article about testing systems.</p></div></body></html>"""
        result = extract_main_content(html, "https://example.com/post")
        assert result.method == "selector_fallback"
        assert result.rejected
        assert result.rejected[0].startswith("readability")
        assert "Hello world" in _text(result.html)

    def test_strategy_error_moves_on(self, article_html):
        with patch(
            "pagedigest.extractors.main_content.Document",
            side_effect=RuntimeError("boom"),
        ):
            result = extract_main_content(article_html, "https://example.com/blog/testing-systems")
        assert result.method == "selector_fallback"
        assert result.rejected == ("readability: error: boom",)
        assert "quorum read" in _text(result.html)

    def test_never_empty(self):
        assert isolate_main_content("") == "<body></body>"

    def test_blank_body_returns_body(self):
        markup = isolate_main_content("<html><body>   </body></html>")
        assert markup.startswith("<body")
