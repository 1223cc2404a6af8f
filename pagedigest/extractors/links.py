"""Related-link classification.

Collects contextual links ("see also", "related articles", further reading)
from four sources, in this order:

1. elements whose class or id marks them as related / see-also / similar
2. sections introduced by a heading such as "See also" or "Voir aussi"
3. ``<aside>`` elements labelled related / see also
4. internal links inside the primary content region

Every candidate goes through the same filters (edit and namespace URLs,
social networks, site furniture, boilerplate text, same-page anchors), then
the merged list is deduplicated by normalized URL, ranked by anchor text
length and capped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup, Tag

from pagedigest import settings
from pagedigest.extractors.linkrules import (
    EXTENDED_PATH_MARKERS,
    has_edit_href,
    is_generic_link_text,
    is_navigation_link,
    is_social_media_link,
    is_special_path,
    link_text,
)
from pagedigest.extractors.urlnorm import (
    extract_domain,
    is_same_domain,
    is_same_page_anchor,
    normalize_url,
    resolve_url,
)
from pagedigest.items import RelatedLink, RelatedLinkType

logger = logging.getLogger(__name__)

_HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

# Source 1: class/id/aria selectors for related-content blocks
_RELATED_SECTION_SELECTORS: tuple[str, ...] = (
    '[class*="related"]',
    '[class*="see-also"]',
    '[class*="also-read"]',
    '[class*="similar"]',
    '[id*="related"]',
    '[id*="see-also"]',
    'section[aria-label*="related"]',
    'section[aria-label*="see also"]',
    ".related-posts",
    ".related-articles",
    ".see-also",
)

# Source 2: heading keywords (English/French) and the type they imply
_SECTION_HEADING_KEYWORDS: tuple[tuple[str, RelatedLinkType], ...] = (
    ("voir aussi", "see_also"),
    ("see also", "see_also"),
    ("articles connexes", "related"),
    ("related articles", "related"),
    ("liens externes", "related"),
    ("external links", "related"),
    ("liens utiles", "related"),
    ("useful links", "related"),
    ("pour aller plus loin", "related"),
    ("further reading", "related"),
    ("lire aussi", "related"),
    ("read also", "related"),
    ("articles liés", "related"),
    ("related topics", "related"),
)

# Source 3
_RELATED_ASIDE_LABELS: tuple[str, ...] = ("related", "see also")

# Source 4: content region and the wiki-style headings promoted to see_also
_CONTENT_REGION_SELECTOR = (
    'main, article, [role="main"], #content, #main-content, '
    ".main-content, .article-content, #mw-content-text"
)
_WIKI_SEE_ALSO_HEADINGS: tuple[str, ...] = (
    "voir aussi",
    "articles connexes",
    "see also",
    "related articles",
)

_MIN_CANDIDATE_TEXT = 5
_MIN_FINAL_TEXT = 10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _attr_lower(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value).lower()
    return str(value or "").lower()


def _section_type(section: Tag | None) -> RelatedLinkType:
    if section is None:
        return "related"
    marker = _attr_lower(section, "class") + " " + _attr_lower(section, "id")
    if "see-also" in marker:
        return "see_also"
    if "redirect" in marker:
        return "redirect"
    return "related"


def _siblings_until(start: Tag, stop_tags: tuple[str, ...], *, nested: bool = False) -> list[Tag]:
    """Element siblings after *start*, up to the next heading.

    With *nested*, a sibling that merely contains a heading also stops the
    run (headings wrapped in a ``div``, as modern MediaWiki does).
    """
    run: list[Tag] = []
    for sib in start.next_siblings:
        if not isinstance(sib, Tag):
            continue
        if sib.name in stop_tags:
            break
        if nested and sib.find(list(stop_tags)) is not None:
            break
        run.append(sib)
    return run


def _anchors(section: Iterable[Tag]) -> Iterator[Tag]:
    for el in section:
        if el.name == "a" and el.get("href"):
            yield el
        for a in el.find_all("a", href=True, limit=settings.MAX_SCAN_NODES):
            if isinstance(a, Tag):
                yield a


def _candidate(
    a: Tag,
    base_url: str,
    link_type: RelatedLinkType,
    *,
    base_domain: str | None = None,
) -> RelatedLink | None:
    """Apply the shared filters to anchor *a*; None when it is rejected."""
    href = str(a.get("href") or "").strip()
    if not href or has_edit_href(href):
        return None

    url = resolve_url(href, base_url)
    if url is None:
        return None
    if base_domain is not None and not is_same_domain(url, base_domain):
        return None
    if is_special_path(url, EXTENDED_PATH_MARKERS):
        return None
    if is_social_media_link(url) or is_navigation_link(a):
        return None

    text = link_text(a)
    if len(text) < _MIN_CANDIDATE_TEXT or is_generic_link_text(text):
        return None
    if is_same_page_anchor(url, base_url):
        return None

    return RelatedLink(url=url, text=text, type=link_type)


def _collect(
    anchors: Iterable[Tag],
    base_url: str,
    link_type: RelatedLinkType,
    *,
    base_domain: str | None = None,
) -> list[RelatedLink]:
    links: list[RelatedLink] = []
    for a in anchors:
        link = _candidate(a, base_url, link_type, base_domain=base_domain)
        if link is not None:
            links.append(link)
    return links


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def _links_from_related_sections(soup: BeautifulSoup, base_url: str) -> list[RelatedLink]:
    links: list[RelatedLink] = []
    seen: set[int] = set()
    for selector in _RELATED_SECTION_SELECTORS:
        for section in soup.select(selector):
            if id(section) in seen:
                continue
            seen.add(id(section))
            links.extend(_collect(_anchors([section]), base_url, _section_type(section)))
    return links


def _heading_type(text: str) -> RelatedLinkType | None:
    for keyword, link_type in _SECTION_HEADING_KEYWORDS:
        if keyword in text:
            return link_type
    return None


def _links_from_titled_sections(soup: BeautifulSoup, base_url: str) -> list[RelatedLink]:
    links: list[RelatedLink] = []
    for heading in soup.find_all(_HEADING_TAGS):
        if not isinstance(heading, Tag):
            continue
        keyword_type = _heading_type(heading.get_text().lower().strip())
        if keyword_type is None:
            continue

        # Wrapped headings (MediaWiki "mw-heading" divs) often only have an
        # edit link beside them, so each run must yield a link to be used.
        parent = heading.parent if isinstance(heading.parent, Tag) else None
        runs = [_siblings_until(heading, _HEADING_TAGS)]
        if parent is not None:
            runs.append(_siblings_until(parent, _HEADING_TAGS, nested=True))
            # The whole parent only when the heading has no following content
            if not any(runs):
                runs.append([parent])

        for section in runs:
            if not section:
                continue
            link_type = keyword_type
            if link_type == "related":
                link_type = _section_type(section[0])
            found = _collect(_anchors(section), base_url, link_type)
            if found:
                links.extend(found)
                break
    return links


def _links_from_asides(soup: BeautifulSoup, base_url: str) -> list[RelatedLink]:
    links: list[RelatedLink] = []
    for aside in soup.find_all("aside"):
        if not isinstance(aside, Tag):
            continue
        label = _attr_lower(aside, "aria-label")
        if any(m in label for m in _RELATED_ASIDE_LABELS):
            links.extend(_collect(_anchors([aside]), base_url, "related"))
    return links


def _content_region(soup: BeautifulSoup) -> Tag | None:
    region = soup.select_one(_CONTENT_REGION_SELECTOR)
    if region is not None:
        return region
    body = soup.find("body")
    if not isinstance(body, Tag):
        return None
    for el in body.find_all(["nav", "header", "footer"]):
        if isinstance(el, Tag) and not el.decomposed:
            el.decompose()
    return body


def _links_from_main_content(soup: BeautifulSoup, base_url: str) -> list[RelatedLink]:
    """Internal links of the content region, see-also sections first.

    Mutates *soup* when it has to fall back to the stripped ``<body>``, so it
    runs after the other sources.
    """
    region = _content_region(soup)
    if region is None:
        return []
    base_domain = extract_domain(base_url)

    links: list[RelatedLink] = []
    for heading in region.find_all(["h2", "h3"]):
        if not isinstance(heading, Tag):
            continue
        text = heading.get_text().lower()
        if not any(kw in text for kw in _WIKI_SEE_ALSO_HEADINGS):
            continue
        section = _siblings_until(heading, ("h1", "h2", "h3"))
        nxt = heading.find_next_sibling()
        if isinstance(nxt, Tag) and (not section or nxt is not section[0]):
            section.insert(0, nxt)
        links.extend(_collect(_anchors(section), base_url, "see_also", base_domain=base_domain))

    anchors = region.find_all("a", href=True, limit=settings.MAX_SCAN_NODES)
    links.extend(_collect(anchors, base_url, "related", base_domain=base_domain))

    links.sort(key=lambda link: len(link.text), reverse=True)
    return links[: settings.MAX_CONTENT_RELATED_LINKS]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def dedupe_links(links: Iterable[RelatedLink], base_url: str) -> list[RelatedLink]:
    """Drop self-links, repeated normalized URLs and short anchor texts."""
    base_norm = normalize_url(base_url)
    seen: set[str] = set()
    kept: list[RelatedLink] = []
    for link in links:
        norm = normalize_url(link.url)
        if norm == base_norm or norm in seen:
            continue
        if len(link.text) < _MIN_FINAL_TEXT:
            continue
        seen.add(norm)
        kept.append(link)
    return kept


def extract_related_links(html: str, base_url: str) -> list[RelatedLink]:
    """Extract and rank contextual links from *html*.

    Ranking is by anchor text length, longest first; ties keep discovery
    order.  Returns at most 20 links, or ``[]`` on any internal failure.
    """
    try:
        soup = BeautifulSoup(html or "", "lxml")
        candidates: list[RelatedLink] = []
        candidates.extend(_links_from_related_sections(soup, base_url))
        candidates.extend(_links_from_titled_sections(soup, base_url))
        candidates.extend(_links_from_asides(soup, base_url))
        candidates.extend(_links_from_main_content(soup, base_url))
    except Exception as exc:
        logger.warning("related link extraction failed for %s: %s", base_url, exc)
        return []

    links = dedupe_links(candidates, base_url)
    links.sort(key=lambda link: len(link.text), reverse=True)
    logger.debug("%d related links (of %d candidates) for %s", len(links), len(candidates), base_url)
    return links[: settings.MAX_RELATED_LINKS]
