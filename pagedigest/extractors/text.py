"""Render isolated content markup as clean, paragraph-structured text."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from pagedigest.extractors.main_content import isolate_main_content

_NON_TEXT_TAGS: tuple[str, ...] = ("script", "style", "noscript")
_BLOCK_TAGS: tuple[str, ...] = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "li")

# More block fragments than this switches to the structured rendering
_STRUCTURED_MIN_FRAGMENTS = 5

_WHITESPACE_RE = re.compile(r"\s+")
_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n")


def markup_to_text(markup: str) -> str:
    """Convert content *markup* to plain text.

    Pages with enough ``p``/``h1-h6``/``li`` blocks keep those boundaries as
    blank-line separated paragraphs.  Anything sparser is flattened to a
    single whitespace-collapsed line.
    """
    if not markup or not markup.strip():
        return ""

    soup = BeautifulSoup(markup, "lxml")
    for el in soup.find_all(_NON_TEXT_TAGS):
        if isinstance(el, Tag) and not el.decomposed:
            el.decompose()

    fragments: list[str] = []
    for el in soup.find_all(_BLOCK_TAGS):
        text = el.get_text().strip()
        if text:
            fragments.append(text)
    if len(fragments) > _STRUCTURED_MIN_FRAGMENTS:
        return "\n\n".join(fragments)

    text = _WHITESPACE_RE.sub(" ", soup.get_text())
    text = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def render_text(html: str, url: str = "") -> str:
    """Isolate the main content of *html* and render it as plain text."""
    return markup_to_text(isolate_main_content(html, url))
