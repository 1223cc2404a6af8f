"""Shared rule tables and predicates for link classification.

Used by both the related-link classifier and the navigation extractor.  The
tables are plain data so they can be tested and extended on their own.
"""

from __future__ import annotations

from urllib.parse import parse_qs, unquote, urlparse

from bs4 import Tag

from pagedigest import settings
from pagedigest.extractors.urlnorm import extract_domain

# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

# Raw href substrings for wiki/CMS edit actions
EDIT_HREF_MARKERS: tuple[str, ...] = (
    "/w/index.php",
    "/edit",
    "action=edit",
    "veaction=edit",
)

# Decoded, lowercased path substrings for MediaWiki-style namespaces
SPECIAL_PATH_MARKERS: tuple[str, ...] = (
    "/special:",
    "/spécial:",
    "/file:",
    "/fichier:",
    "/category:",
    "/catégorie:",
)

# Extra namespaces excluded from related links only
EXTENDED_PATH_MARKERS: tuple[str, ...] = (
    *SPECIAL_PATH_MARKERS,
    "/help:",
    "/aide:",
    "/portal:",
    "/portail:",
    "/discussion:",
    "/talk:",
)

SOCIAL_DOMAINS: tuple[str, ...] = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "linkedin.com",
    "youtube.com",
    "pinterest.com",
    "tiktok.com",
    "snapchat.com",
)

# Substrings of href or text that mark site-furniture links
NAV_KEYWORDS: tuple[str, ...] = (
    "home",
    "about",
    "contact",
    "privacy",
    "terms",
    "cookie",
    "sitemap",
    "#top",
    "#main",
    "javascript:",
)

NAV_CLASS_MARKERS: tuple[str, ...] = ("nav", "menu", "ad", "sponsor", "advertisement")

# Boilerplate anchor text (lowercased): exact, prefix and substring matches
GENERIC_TEXT_EXACT: frozenset[str] = frozenset({"lire", "read", "edit", "modifier"})
GENERIC_TEXT_PREFIXES: tuple[str, ...] = ("modifier", "edit ", "discussion")
GENERIC_TEXT_CONTAINS: tuple[str, ...] = (
    "catégorie:",
    "category:",
    "spécial:",
    "special:",
    "liste des",
    "code source",
)

# Navigation entries that only point back up the site
GENERIC_NAV_TEXT: frozenset[str] = frozenset({"home", "accueil", "back", "retour"})


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return str(value or "")


def has_edit_href(href: str) -> bool:
    href_lower = href.lower()
    return any(m in href_lower for m in EDIT_HREF_MARKERS)


def is_special_path(url: str, markers: tuple[str, ...] = SPECIAL_PATH_MARKERS) -> bool:
    """True for edit URLs and wiki namespaces listed in *markers*."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    path = unquote(parsed.path).lower()
    if any(m in path for m in markers):
        return True
    if "/w/index.php" in path or "/edit" in path:
        return True
    query = parse_qs(parsed.query)
    return "edit" in query.get("action", []) or "edit" in query.get("veaction", [])


def is_social_media_link(url: str) -> bool:
    host = extract_domain(url)
    return any(host == d or host.endswith("." + d) for d in SOCIAL_DOMAINS)


def is_navigation_link(a: Tag) -> bool:
    """True if the anchor looks like site furniture rather than content."""
    href = _attr(a, "href").strip().lower()
    text = a.get_text().lower()
    classes = _attr(a, "class").lower()

    if href.startswith("#"):
        return True
    if any(kw in href for kw in NAV_KEYWORDS):
        return True
    if any(kw in text for kw in NAV_KEYWORDS):
        return True
    return any(m in classes for m in NAV_CLASS_MARKERS)


def is_generic_link_text(text: str) -> bool:
    lower = text.lower().strip()
    if lower in GENERIC_TEXT_EXACT:
        return True
    if lower.startswith(GENERIC_TEXT_PREFIXES):
        return True
    return any(m in lower for m in GENERIC_TEXT_CONTAINS)


def link_text(a: Tag) -> str:
    """Best human label for an anchor, capped at the link text limit.

    Order: aria-label, title, visible text, first image alt, then "Link".
    """
    text = _attr(a, "aria-label").strip() or _attr(a, "title").strip()
    if not text:
        text = " ".join(a.get_text().split())
    if not text:
        img = a.find("img")
        if isinstance(img, Tag):
            text = _attr(img, "alt").strip()
    return (text or "Link")[: settings.MAX_LINK_TEXT]
