"""Navigation-link extraction (sidebar menus, tables of contents).

Only one container is used: the first selector match, in priority order,
that yields at least one qualifying link.  Containers sitting directly inside
a header or footer are skipped since those hold the primary site nav.
"""

from __future__ import annotations

import logging
from bs4 import BeautifulSoup, Tag

from pagedigest import settings
from pagedigest.extractors.linkrules import GENERIC_NAV_TEXT, is_special_path, link_text
from pagedigest.extractors.urlnorm import (
    extract_domain,
    is_same_domain,
    is_same_page_anchor,
    normalize_url,
    resolve_url,
)
from pagedigest.items import NavigationLink

logger = logging.getLogger(__name__)

_NAVIGATION_SELECTORS: tuple[str, ...] = (
    'nav[class*="sidebar"]',
    'nav[class*="menu"]',
    'nav[class*="toc"]',
    'nav[class*="table-of-contents"]',
    'nav[id*="sidebar"]',
    'nav[id*="menu"]',
    'nav[id*="toc"]',
    'nav[id*="navigation"]',
    'aside[class*="sidebar"]',
    'aside[class*="menu"]',
    'aside[class*="toc"]',
    'aside[class*="navigation"]',
    'aside[id*="sidebar"]',
    'aside[id*="menu"]',
    'aside[id*="toc"]',
    'aside[id*="navigation"]',
    '[class*="sidebar"] nav',
    '[class*="sidebar"] ul',
    '[class*="sidebar"] ol',
    '[id*="sidebar"] nav',
    '[id*="sidebar"] ul',
    '[id*="sidebar"] ol',
    '[class*="toc"]',
    '[id*="toc"]',
    '[class*="table-of-contents"]',
    '[id*="table-of-contents"]',
)

_CHROME_PARENT_MARKERS: tuple[str, ...] = ("header", "footer")
_TOC_MARKER = "toc"
_MIN_TEXT = 3


def _attr_lower(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value).lower()
    return str(value or "").lower()


def _inside_chrome(container: Tag) -> bool:
    parent = container.parent
    if not isinstance(parent, Tag):
        return False
    marker = _attr_lower(parent, "class") + " " + _attr_lower(parent, "id")
    return any(m in marker for m in _CHROME_PARENT_MARKERS)


def _is_toc(container: Tag) -> bool:
    return _TOC_MARKER in _attr_lower(container, "class") or _TOC_MARKER in _attr_lower(container, "id")


def list_depth(a: Tag) -> int | None:
    """Number of ``<ul>``/``<ol>`` ancestors of *a*; None outside any list."""
    depth = sum(1 for parent in a.parents if parent.name in ("ul", "ol"))
    return depth or None


def _links_from_container(container: Tag, base_url: str, base_domain: str) -> list[NavigationLink]:
    keep_anchors = _is_toc(container)
    links: list[NavigationLink] = []

    for a in container.find_all("a", href=True, limit=settings.MAX_SCAN_NODES):
        if not isinstance(a, Tag):
            continue
        url = resolve_url(str(a.get("href") or ""), base_url)
        if url is None or not is_same_domain(url, base_domain):
            continue
        if not keep_anchors and is_same_page_anchor(url, base_url):
            continue
        if is_special_path(url):
            continue

        text = link_text(a)
        if len(text) < _MIN_TEXT:
            continue

        links.append(NavigationLink(url=url, text=text, level=list_depth(a)))

    return links


def _dedupe(links: list[NavigationLink], base_url: str) -> list[NavigationLink]:
    """Drop repeats, links back to the page itself and generic entries.

    Keys are normalized URLs, so in-page anchors collapse onto the base page.
    """
    base_norm = normalize_url(base_url)
    seen: set[str] = set()
    kept: list[NavigationLink] = []
    for link in links:
        norm = normalize_url(link.url)
        if norm == base_norm or norm in seen:
            continue
        text = link.text.lower().strip()
        if len(text) < _MIN_TEXT or text in GENERIC_NAV_TEXT:
            continue
        seen.add(norm)
        kept.append(link)
    return kept


def extract_navigation_links(html: str, base_url: str) -> list[NavigationLink]:
    """Extract structural menu/sidebar/TOC links from *html*.

    Returns at most 50 links in document order, or ``[]`` on any internal
    failure.
    """
    try:
        soup = BeautifulSoup(html or "", "lxml")
        base_domain = extract_domain(base_url)

        links: list[NavigationLink] = []
        for selector in _NAVIGATION_SELECTORS:
            container = soup.select_one(selector)
            if container is None or _inside_chrome(container):
                continue
            links = _links_from_container(container, base_url, base_domain)
            if links:
                logger.debug("navigation container %r for %s", selector, base_url)
                break
    except Exception as exc:
        logger.warning("navigation link extraction failed for %s: %s", base_url, exc)
        return []

    return _dedupe(links, base_url)[: settings.MAX_NAVIGATION_LINKS]
