"""pagedigest.extractors.issues - access-issue detector.

Pure-function, no network calls.  Flags pages that are probably not showing
their full content: paywalls, login walls, truncated previews, and bot
challenge pages.  Every heuristic is a fixed table of keywords, selectors or
patterns; each table that matches contributes a signal to the issue message.

Usage::

    from pagedigest.extractors.issues import detect_issues

    for issue in detect_issues(html):
        print(issue.type, issue.message)
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from pagedigest.items import Issue

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paywall
# ---------------------------------------------------------------------------

_PAYWALL_KEYWORDS: tuple[str, ...] = (
    "subscribe",
    "premium",
    "paywall",
    "members only",
    "unlock",
    "subscription required",
    "premium content",
    "pay to read",
    "become a member",
)

_PAYWALL_SELECTORS: tuple[str, ...] = (
    ".paywall",
    ".premium-content",
    ".subscription-required",
    ".members-only",
    '[class*="paywall"]',
    '[class*="premium"]',
    '[id*="paywall"]',
)

_PAYWALL_EXPLICIT_PHRASES: tuple[str, ...] = (
    "this article is for subscribers",
    "subscribe to continue reading",
    "premium content",
)

# ---------------------------------------------------------------------------
# Login wall
# ---------------------------------------------------------------------------

_LOGIN_FORM_TOKENS: tuple[str, ...] = ("login", "signin", "auth")

_LOGIN_PHRASES: tuple[str, ...] = (
    "please log in",
    "sign in to continue",
    "login required",
    "please sign in",
    "you must be logged in",
)

_LOGIN_HREF_TOKENS: tuple[str, ...] = ("login", "signin")
_LOGIN_LINK_TEXT: tuple[str, ...] = ("log in", "sign in")
# More login links than this means the page itself is a login screen
_LOGIN_LINK_THRESHOLD = 3

# ---------------------------------------------------------------------------
# Partial content
# ---------------------------------------------------------------------------

_PARTIAL_PHRASES: tuple[str, ...] = (
    "continue reading",
    "read more",
    "preview",
    "unlock full article",
    "subscribe to read",
    "read the full story",
    "view full article",
)

_READ_MORE_CONTROL_TEXT: tuple[str, ...] = ("read more", "continue reading", "unlock")

_PREVIEW_SELECTORS: str = '[class*="preview"], [class*="excerpt"]'

# ---------------------------------------------------------------------------
# Bot challenges (compiled once at import time)
# ---------------------------------------------------------------------------

_CHALLENGE_TITLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"attention required", re.IGNORECASE),
    re.compile(r"just a moment", re.IGNORECASE),
)

_CHALLENGE_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    ("cloudflare", (
        re.compile(r"cf-browser-verification", re.IGNORECASE),
        re.compile(r"challenges\.cloudflare\.com", re.IGNORECASE),
        re.compile(r"cf-challenge", re.IGNORECASE),
    )),
    ("captcha", (
        re.compile(r"g-recaptcha", re.IGNORECASE),
        re.compile(r"h-captcha", re.IGNORECASE),
        re.compile(r"hcaptcha\.com", re.IGNORECASE),
        re.compile(r"cf-turnstile", re.IGNORECASE),
        re.compile(r"recaptcha\.net", re.IGNORECASE),
    )),
    ("datadome", (
        re.compile(r"datadome", re.IGNORECASE),
        re.compile(r"ddCaptcha", re.IGNORECASE),
    )),
    ("perimeterx", (
        re.compile(r"px-captcha", re.IGNORECASE),
        re.compile(r"_pxAppId", re.IGNORECASE),
        re.compile(r"perimeterx", re.IGNORECASE),
    )),
    ("akamai", (
        re.compile(r"ak_bmsc", re.IGNORECASE),
        re.compile(r"bmak\.js", re.IGNORECASE),
    )),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _body_text(soup: BeautifulSoup) -> str:
    body = soup.find("body")
    return (body if isinstance(body, Tag) else soup).get_text().lower()


def _attr_lower(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value).lower()
    return str(value or "").lower()


def _paywall_signals(soup: BeautifulSoup, body_text: str) -> list[str]:
    signals = [f'keyword: "{kw}"' for kw in _PAYWALL_KEYWORDS if kw in body_text]

    signals.extend(
        f"element: {selector}"
        for selector in _PAYWALL_SELECTORS
        if soup.select_one(selector) is not None
    )

    # Any element containing the phrase means the document text contains it
    doc_text = soup.get_text().lower()
    if any(phrase in doc_text for phrase in _PAYWALL_EXPLICIT_PHRASES):
        signals.append("explicit paywall message")

    return signals


def _login_signals(soup: BeautifulSoup, body_text: str) -> list[str]:
    signals: list[str] = []

    for form in soup.find_all("form"):
        if not isinstance(form, Tag):
            continue
        attrs = " ".join(_attr_lower(form, name) for name in ("action", "id", "class"))
        if any(tok in attrs for tok in _LOGIN_FORM_TOKENS):
            signals.append("login form detected")
            break

    for phrase in _LOGIN_PHRASES:
        if phrase in body_text:
            signals.append(f'message: "{phrase}"')
            break

    login_links = 0
    for a in soup.find_all("a"):
        if not isinstance(a, Tag):
            continue
        href = _attr_lower(a, "href")
        text = a.get_text().lower()
        if any(tok in href for tok in _LOGIN_HREF_TOKENS) or any(
            t in text for t in _LOGIN_LINK_TEXT
        ):
            login_links += 1
    if login_links > _LOGIN_LINK_THRESHOLD:
        signals.append("multiple login links")

    return signals


def _partial_signals(soup: BeautifulSoup, body_text: str) -> list[str]:
    signals = [f'keyword: "{kw}"' for kw in _PARTIAL_PHRASES if kw in body_text]

    for el in soup.find_all(["button", "a"]):
        text = el.get_text().lower()
        if any(t in text for t in _READ_MORE_CONTROL_TEXT):
            signals.append("read more button detected")
            break

    if soup.select_one(_PREVIEW_SELECTORS) is not None:
        signals.append("preview/excerpt class detected")

    return signals


def _challenge_signals(soup: BeautifulSoup, html: str) -> list[str]:
    signals: list[str] = []

    title = soup.find("title")
    title_text = title.get_text() if title else ""
    cf_title = any(p.search(title_text) for p in _CHALLENGE_TITLE_PATTERNS)

    for name, patterns in _CHALLENGE_PATTERNS:
        hit = any(p.search(html) for p in patterns)
        if name == "cloudflare":
            hit = hit or cf_title
        if hit:
            signals.append(name)
    return signals


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def detect_issues(html: str) -> list[Issue]:
    """Detect access issues in *html*.

    All heuristics run independently; each produces at most one issue.  The
    result is ordered paywall, login_required, partial_content, other and
    only holds the types that fired.  Internal failures yield ``[]``.
    """
    try:
        soup = BeautifulSoup(html or "", "lxml")
        body_text = _body_text(soup)

        checks = (
            ("paywall", "Paywall detected", _paywall_signals(soup, body_text)),
            ("login_required", "Login required", _login_signals(soup, body_text)),
            ("partial_content", "Partial content detected", _partial_signals(soup, body_text)),
            ("other", "Bot challenge detected", _challenge_signals(soup, html or "")),
        )
    except Exception as exc:
        logger.warning("issue detection failed: %s", exc)
        return []

    return [
        Issue(type=issue_type, message=f"{label}: {', '.join(signals)}")
        for issue_type, label, signals in checks
        if signals
    ]
