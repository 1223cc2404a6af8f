"""Main content isolation with an ordered strategy chain.

Strategy 1: readability-lxml (Mozilla Readability algorithm), behind an
            acceptance gate that catches header/nav chrome picked by mistake
Strategy 2: selector fallback (site-specific selectors → semantic tags →
            longest <div> → <body>)

Each strategy returns a :class:`StrategyResult`: markup when accepted, a
rejection reason otherwise.  The first accepted result wins.  The selector
fallback never rejects, so the chain always yields markup.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag
from readability import Document  # type: ignore[import-untyped]

from pagedigest import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

# Extracted text shorter than this is not considered content
_MIN_TEXT_CHARS = 100
# Below this a region is "thin" and later fallback tiers get a chance
_RICH_TEXT_CHARS = 500
# Readability output with text/markup at or below this ratio is mostly tags
_MIN_TEXT_RATIO = 0.10
_MAX_DATA_ATTRIBUTES = 10
_MAX_CUSTOM_ELEMENTS = 5

_DATA_ATTR_RE = re.compile(r"data-\w+")
_CUSTOM_ELEMENT_RE = re.compile(r"<[a-z]+-[a-z-]+", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Selector tables (tried in order)
# ---------------------------------------------------------------------------

# Site-specific containers: GitHub, MediaWiki, generic ids, WordPress/blogs, ARIA
_PRIORITY_SELECTORS: tuple[str, ...] = (
    ".repository-content",
    "#repository-container",
    "#mw-content-text",
    ".mw-parser-output",
    "#content",
    "#main-content",
    ".main-content",
    ".entry-content",
    ".post-content",
    '[role="article"]',
)

_SEMANTIC_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    '[role="main"]',
    ".article",
    ".content",
    ".post",
    ".entry",
)

_CHROME_TAGS: tuple[str, ...] = ("nav", "header", "footer")

# ---------------------------------------------------------------------------
# Cleaning rules
# ---------------------------------------------------------------------------

_AD_CLASS_MARKERS: tuple[str, ...] = ("ad-", "-ad-", "advertisement", "sponsor-")
_AD_ID_MARKERS: tuple[str, ...] = ("ad-", "-ad-", "advertisement")
# Ad markers are substrings, so "ad-" also hits e.g. "readability-..."
_AD_ALLOW_TOKENS: tuple[str, ...] = ("readability", "advance")

_POPUP_MARKERS: tuple[str, ...] = ("popup", "modal", "overlay")

_RELATED_ASIDE_LABELS: tuple[str, ...] = ("related", "see also")
_RELATED_ASIDE_CLASSES: tuple[str, ...] = ("related",)

# Residual ad sweep applied to the region picked by the selector fallback
_RESIDUAL_AD_CLASS_MARKERS: tuple[str, ...] = ("ad", "sponsor")
_RESIDUAL_AD_ID_MARKERS: tuple[str, ...] = ("ad",)


def _class_str(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.lower()
    return " ".join(classes).lower()


def _id_str(tag: Tag) -> str:
    return str(tag.get("id") or "").lower()


def _decompose_all(elements: Iterable[Tag]) -> None:
    """Decompose *elements*, skipping any already removed with an ancestor."""
    for el in list(elements):
        if isinstance(el, Tag) and not el.decomposed:
            el.decompose()


def _inner_html(soup: BeautifulSoup) -> str:
    body = soup.find("body")
    if isinstance(body, Tag):
        return body.decode_contents()
    return soup.decode_contents()


def _text_length(el: Tag) -> int:
    return len(el.get_text().strip())


def _is_ad_marked(tag: Tag) -> bool:
    cls = _class_str(tag)
    ident = _id_str(tag)
    if not (
        any(m in cls for m in _AD_CLASS_MARKERS)
        or any(m in ident for m in _AD_ID_MARKERS)
    ):
        return False
    return not any(tok in cls or tok in ident for tok in _AD_ALLOW_TOKENS)


def _is_popup(tag: Tag) -> bool:
    cls = _class_str(tag)
    return any(m in cls for m in _POPUP_MARKERS)


def _is_related_aside(tag: Tag) -> bool:
    label = str(tag.get("aria-label") or "").lower()
    cls = _class_str(tag)
    return any(m in label for m in _RELATED_ASIDE_LABELS) or any(
        m in cls for m in _RELATED_ASIDE_CLASSES
    )


def clean_content(html: str) -> str:
    """Strip scripts, ads, popups and chrome from *html*, keeping structure.

    Asides survive only when they carry a related/see-also signal, since
    those hold contextual links rather than promotion or navigation.
    """
    soup = BeautifulSoup(html, "lxml")

    _decompose_all(soup.find_all(["script", "style"]))

    tags = [el for el in soup.find_all(True) if isinstance(el, Tag)]
    _decompose_all(el for el in tags if _is_ad_marked(el))

    tags = [el for el in soup.find_all(True) if isinstance(el, Tag)]
    _decompose_all(el for el in tags if _is_popup(el))

    _decompose_all(soup.find_all(_CHROME_TAGS))
    _decompose_all(
        el for el in soup.find_all("aside")
        if isinstance(el, Tag) and not _is_related_aside(el)
    )

    return _inner_html(soup)


# ---------------------------------------------------------------------------
# Strategy results
# ---------------------------------------------------------------------------

class StrategyResult(NamedTuple):
    html: str | None
    method: str
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.html is not None


class ExtractionResult(NamedTuple):
    html: str
    method: str
    # "method: reason" for every strategy rejected before the winner
    rejected: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Strategy 1: readability-lxml
# ---------------------------------------------------------------------------

def check_readability_candidate(markup: str) -> str | None:
    """Return why *markup* looks like chrome rather than content, or None."""
    text = BeautifulSoup(markup, "lxml").get_text().strip()
    if len(text) < _MIN_TEXT_CHARS:
        return f"text too short ({len(text)} chars)"

    ratio = len(text) / max(len(markup), 1)
    if ratio <= _MIN_TEXT_RATIO:
        return f"text/markup ratio too low ({ratio:.2f})"

    data_attrs = len(_DATA_ATTR_RE.findall(markup))
    if data_attrs > _MAX_DATA_ATTRIBUTES:
        return f"too many data-* attributes ({data_attrs})"

    custom_elements = len(_CUSTOM_ELEMENT_RE.findall(markup))
    if custom_elements > _MAX_CUSTOM_ELEMENTS:
        return f"too many custom elements ({custom_elements})"

    return None


def readability_strategy(html: str, url: str = "") -> StrategyResult:
    doc = Document(html, url=url or None)
    summary = doc.summary(html_partial=True)
    if not summary or not summary.strip():
        return StrategyResult(None, "readability", "no result")

    reason = check_readability_candidate(summary)
    if reason:
        return StrategyResult(None, "readability", reason)

    cleaned = clean_content(summary)
    cleaned_len = len(BeautifulSoup(cleaned, "lxml").get_text().strip())
    if cleaned_len <= _MIN_TEXT_CHARS:
        return StrategyResult(
            None, "readability", f"cleaned text too short ({cleaned_len} chars)",
        )
    return StrategyResult(cleaned, "readability")


# ---------------------------------------------------------------------------
# Strategy 2: selector fallback
# ---------------------------------------------------------------------------

def _pick_region(soup: BeautifulSoup) -> Tag | None:
    best: Tag | None = None
    best_len = 0

    for selector in _PRIORITY_SELECTORS:
        el = soup.select_one(selector)
        if el is None:
            continue
        length = _text_length(el)
        if length > best_len and length > _MIN_TEXT_CHARS:
            best, best_len = el, length

    if best is None or best_len < _RICH_TEXT_CHARS:
        for selector in _SEMANTIC_SELECTORS:
            el = soup.select_one(selector)
            if el is None:
                continue
            length = _text_length(el)
            if length > best_len:
                best, best_len = el, length

    if best is None or best_len < _RICH_TEXT_CHARS:
        for div in soup.find_all("div", limit=settings.MAX_SCAN_NODES):
            if not isinstance(div, Tag):
                continue
            length = _text_length(div)
            if length <= best_len or length <= _RICH_TEXT_CHARS:
                continue
            if div.find("a") is not None or div.find("p") is not None:
                best, best_len = div, length

    if best is None or best_len < _MIN_TEXT_CHARS:
        body = soup.find("body")
        best = body if isinstance(body, Tag) else None

    return best


def _strip_residual_ads(region: Tag) -> None:
    _decompose_all(
        el for el in region.find_all(True)
        if isinstance(el, Tag) and (
            any(m in _class_str(el) for m in _RESIDUAL_AD_CLASS_MARKERS)
            or any(m in _id_str(el) for m in _RESIDUAL_AD_ID_MARKERS)
        )
    )


def selector_fallback(html: str) -> str:
    """Pick the main region by ranked selectors, falling back to <body>."""
    soup = BeautifulSoup(html or "", "lxml")
    _decompose_all(soup.find_all(["script", "style", *_CHROME_TAGS]))

    region = _pick_region(soup)
    if region is not None:
        _strip_residual_ads(region)
        markup = region.decode_contents()
        if markup.strip():
            return clean_content(markup)

    return clean_content(_inner_html(soup))


def selector_strategy(html: str, url: str = "") -> StrategyResult:
    return StrategyResult(selector_fallback(html), "selector_fallback")


_STRATEGIES: tuple[Callable[[str, str], StrategyResult], ...] = (
    readability_strategy,
    selector_strategy,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_main_content(html: str, url: str = "") -> ExtractionResult:
    """Run the strategy chain over *html* and return the first accepted region.

    Exceptions raised inside a strategy count as a rejection; the chain then
    moves on.  Blank output is replaced by the document body so callers
    always receive some markup.
    """
    rejected: list[str] = []
    for strategy in _STRATEGIES:
        try:
            result = strategy(html, url)
        except Exception as exc:
            name = strategy.__name__.removesuffix("_strategy")
            logger.debug("%s failed for %s: %s", name, url, exc)
            rejected.append(f"{name}: error: {exc}")
            continue
        if result.accepted and result.html is not None and result.html.strip():
            logger.debug("%s accepted for %s", result.method, url)
            return ExtractionResult(result.html, result.method, tuple(rejected))
        logger.debug("%s rejected for %s: %s", result.method, url, result.reason)
        rejected.append(f"{result.method}: {result.reason or 'empty output'}")

    logger.warning("All content strategies came back empty for %s; using <body>", url)
    return ExtractionResult(_body_markup(html), "body", tuple(rejected))


def _body_markup(html: str) -> str:
    try:
        soup = BeautifulSoup(html or "", "lxml")
        _decompose_all(soup.find_all(["script", "style"]))
        body = soup.find("body")
    except Exception as exc:
        logger.debug("body fallback parse failed: %s", exc)
        body = None
    return str(body) if isinstance(body, Tag) else "<body></body>"


def isolate_main_content(html: str, url: str = "") -> str:
    """Return the main content markup of *html*.  Never raises."""
    return extract_main_content(html, url).html
