"""Tests for pagedigest.extractors.navigation."""

from __future__ import annotations

from bs4 import BeautifulSoup

from pagedigest.extractors.navigation import extract_navigation_links, list_depth
from pagedigest.extractors.urlnorm import normalize_url

DOCS_URL = "https://docs.example.com/docs/guide/"


class TestListDepth:
    def test_outside_list(self):
        a = BeautifulSoup('<nav><a href="/x">x</a></nav>', "lxml").find("a")
        assert list_depth(a) is None

    def test_nested(self):
        soup = BeautifulSoup(
            '<ul><li><a id="one" href="/a">a</a><ol><li><a id="two" href="/b">b</a></li></ol></li></ul>',
            "lxml",
        )
        assert list_depth(soup.find(id="one")) == 1
        assert list_depth(soup.find(id="two")) == 2


class TestExtractNavigationLinks:
    def test_sidebar_levels(self):
        html = (
            '<html><body><nav class="sidebar"><ul>'
            '<li><a href="/docs/intro">Intro</a></li>'
            '<li><ul><li><a href="/docs/intro/setup">Setup</a></li></ul></li>'
            "</ul></nav></body></html>"
        )
        links = extract_navigation_links(html, "https://docs.example.com/docs/overview")
        assert [(link.text, link.level) for link in links] == [("Intro", 1), ("Setup", 2)]
        assert links[0].url == "https://docs.example.com/docs/intro"

    def test_docs_fixture(self, docs_html):
        links = extract_navigation_links(docs_html, DOCS_URL)
        assert [(link.text, link.level) for link in links] == [
            ("Introduction", 1),
            ("Installation", 2),
            ("Configuration", 2),
            ("API Reference", 1),
        ]

    def test_docs_fixture_drops_external_and_generic(self, docs_html):
        urls = [link.url for link in extract_navigation_links(docs_html, DOCS_URL)]
        assert not any("github.com" in u for u in urls)
        assert "https://docs.example.com/" not in urls
        assert "https://docs.example.com/docs/guide/" not in urls

    def test_header_container_skipped(self):
        html = """<html><body>
        <header class="site-header"><nav class="menu"><a href="/pricing">Pricing</a></nav></header>
        <aside class="toc"><ul><li><a href="/docs/setup">Setup</a></li></ul></aside>
        </body></html>"""
        links = extract_navigation_links(html, "https://example.com/docs/page")
        assert [link.url for link in links] == ["https://example.com/docs/setup"]

    def test_toc_anchors_collapse_onto_page(self):
        base = "https://docs.example.org/guide/page"
        html = """<html><body><div class="toc"><ul>
        <li><a href="#install">Installation</a></li><li><a href="#usage">Usage</a></li>
        <li><a href="/guide/advanced#tuning">Tuning guide</a></li>
        </ul></div></body></html>"""
        links = extract_navigation_links(html, base)
        assert all(normalize_url(link.url) != normalize_url(base) for link in links)
        assert [link.text for link in links] == ["Tuning guide"]

    def test_toc_of_only_anchors_is_empty(self):
        html = """<html><body><div id="toc"><ol>
        <li><a href="#install">Install</a></li><li><a href="#usage">Usage</a></li>
        </ol></div></body></html>"""
        assert extract_navigation_links(html, "https://example.com/docs/page") == []

    def test_non_toc_drops_same_page_anchors(self):
        html = """<html><body><nav class="sidebar"><ul>
        <li><a href="#top">Top of page</a></li><li><a href="/docs/next">Next page</a></li>
        </ul></nav></body></html>"""
        links = extract_navigation_links(html, "https://example.com/docs/page")
        assert [link.text for link in links] == ["Next page"]

    def test_first_productive_container_wins(self):
        html = """<html><body>
        <nav class="sidebar"><a href="https://elsewhere.org/">Elsewhere</a></nav>
        <nav class="menu"><a href="/docs/a">Chapter A</a></nav>
        <div class="toc"><a href="/docs/b">Chapter B</a></div>
        </body></html>"""
        links = extract_navigation_links(html, "https://example.com/docs/")
        assert [link.text for link in links] == ["Chapter A"]

    def test_special_pages_skipped(self):
        html = """<html><body><nav class="sidebar">
        <a href="/wiki/Special:Random">Random page</a><a href="/wiki/Physics">Physics</a>
        </nav></body></html>"""
        links = extract_navigation_links(html, "https://wiki.example.org/wiki/Main_Page")
        assert [link.text for link in links] == ["Physics"]

    def test_capped_at_fifty(self):
        items = "".join(f'<li><a href="/docs/p{i}">Page {i}</a></li>' for i in range(80))
        html = f'<html><body><nav class="sidebar"><ul>{items}</ul></nav></body></html>'
        assert len(extract_navigation_links(html, "https://example.com/docs/")) == 50

    def test_no_container(self):
        html = "<html><body><p><a href='/docs/x'>Loose link</a></p></body></html>"
        assert extract_navigation_links(html, "https://example.com/") == []

    def test_empty_html(self):
        assert extract_navigation_links("", "https://example.com/") == []
