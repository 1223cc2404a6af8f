"""Deterministic metadata extraction from HTML.

Each field walks an ordered list of sources and keeps the first non-empty,
whitespace-trimmed value:

    title          og:title → twitter:title → <title>
    description    og:description → twitter:description → meta description
    author         meta author → article:author → [rel="author"] text
    published_date article:published_time → meta published → <time datetime>
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from bs4 import BeautifulSoup, Tag

from pagedigest.items import PageMetadata

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _meta(key: str) -> Callable[[BeautifulSoup], str | None]:
    """Source reading ``<meta property|name=key content=...>``."""

    def read(soup: BeautifulSoup) -> str | None:
        for tag in soup.find_all("meta"):
            if not isinstance(tag, Tag):
                continue
            names = (_safe_str(tag.get(attr)).strip().lower() for attr in ("property", "name"))
            if key in names:
                content = _safe_str(tag.get("content")).strip()
                if content:
                    return content
        return None

    return read


def _title_tag(soup: BeautifulSoup) -> str | None:
    title = soup.find("title")
    return title.get_text().strip() if title else None


def _rel_author(soup: BeautifulSoup) -> str | None:
    for el in soup.select('[rel="author"]'):
        text = el.get_text().strip()
        if text:
            return text
    return None


def _time_datetime(soup: BeautifulSoup) -> str | None:
    """Return the datetime attribute of the first <time datetime> element."""
    time_tag = soup.find("time", attrs={"datetime": True})
    if time_tag and isinstance(time_tag, Tag):
        return _safe_str(time_tag.get("datetime")).strip() or None
    return None


# Ordered sources per output field
_FIELD_SOURCES: dict[str, tuple[Callable[[BeautifulSoup], str | None], ...]] = {
    "title": (
        _meta("og:title"),
        _meta("twitter:title"),
        _title_tag,
    ),
    "description": (
        _meta("og:description"),
        _meta("twitter:description"),
        _meta("description"),
    ),
    "author": (
        _meta("author"),
        _meta("article:author"),
        _rel_author,
    ),
    "published_date": (
        _meta("article:published_time"),
        _meta("published"),
        _time_datetime,
    ),
}


def _first(soup: BeautifulSoup, sources: tuple[Callable[[BeautifulSoup], str | None], ...]) -> str | None:
    for source in sources:
        value = source(soup)
        if value and value.strip():
            return value.strip()
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_metadata(html: str, soup: BeautifulSoup | None = None) -> PageMetadata | None:
    """Extract title, description, author and published date from *html*.

    Args:
        html: Raw HTML string.
        soup: Pre-parsed BeautifulSoup object.  When provided the HTML is
              not re-parsed.

    Returns:
        :class:`~pagedigest.items.PageMetadata`, or ``None`` when no field
        could be resolved.
    """
    if soup is None:
        try:
            soup = BeautifulSoup(html or "", "lxml")
        except Exception as exc:
            logger.debug("metadata parse failed: %s", exc)
            return None

    fields = {name: _first(soup, sources) for name, sources in _FIELD_SOURCES.items()}
    if not any(fields.values()):
        return None
    return PageMetadata(**fields)
