"""pagedigest.query - single-page fetch and extraction API.

Lets any Python script import and call ``fetch()`` to get a structured,
bounded-size digest of one web page.  Uses only the stdlib (``urllib``) for
HTTP.

Basic usage::

    from pagedigest.query import fetch

    result = fetch("https://example.com/blog/some-post")
    print(result.metadata.title)
    print(result.content.text)
    for link in result.related_links or []:
        print(link.type, link.url)

    # Caller-facing JSON dict, unselected fields removed
    payload = result.to_payload()

Low-level access::

    from pagedigest.query import fetch_page, extract

    page = fetch_page("https://example.com/blog/post")
    result = extract(page.html, page.final_url, {"mode": "full"})
"""

from __future__ import annotations

import gzip
import logging
import urllib.error
import urllib.request
import zlib
from collections.abc import Mapping
from typing import Any, NamedTuple
from urllib.parse import urlparse

from pydantic import ValidationError

from pagedigest import settings
from pagedigest.extractors.issues import detect_issues
from pagedigest.extractors.links import extract_related_links
from pagedigest.extractors.main_content import extract_main_content
from pagedigest.extractors.metadata import read_metadata
from pagedigest.extractors.navigation import extract_navigation_links
from pagedigest.extractors.text import markup_to_text
from pagedigest.items import ExtractedContent, ExtractionOptions, StructuredResult

logger = logging.getLogger(__name__)

_HTML_CONTENT_TYPES: frozenset[str] = frozenset({"text/html", "application/xhtml+xml"})
# Codes HTTPRedirectHandler follows; one of these surfacing as HTTPError means
# the hop limit was exhausted.
_REDIRECT_CODES: frozenset[int] = frozenset({301, 302, 303, 307, 308})


# ---------------------------------------------------------------------------
# Public exceptions
# ---------------------------------------------------------------------------

class PageDigestError(RuntimeError):
    """Base class for errors surfaced to the caller.

    Attributes:
        kind    -- machine-readable error kind
        details -- optional extra context, JSON-serialisable
    """

    kind = "internal"

    def __init__(self, message: str, *, kind: str | None = None, details: Any = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"kind": self.kind, "message": str(self)}
        if self.details is not None:
            error["details"] = self.details
        return error


class InvalidInputError(PageDigestError, ValueError):
    """Raised for malformed URLs, unsupported schemes and bad option values."""

    kind = "invalid_input"

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message, details={"value": value} if value is not None else None)
        self.value = value


class FetchError(PageDigestError):
    """Raised when a URL cannot be fetched.

    Attributes:
        kind   -- invalid_url | timeout | too_many_redirects | http_error |
                  wrong_content_type | network
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    kind = "network"

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int = 0,
        *,
        kind: str = "network",
    ) -> None:
        details: dict[str, Any] = {"url": url}
        if status:
            details["status"] = status
        super().__init__(message, kind=kind, details=details)
        self.url = url
        self.status = status


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def validate_url(url: Any) -> str:
    """Return *url* stripped, or raise :class:`InvalidInputError`."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("URL is required and must be a non-empty string", value=url)
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid URL format: {url}", value=url) from exc
    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidInputError(
            f"Unsupported URL scheme: {parsed.scheme!r}. Only http and https are supported.",
            value=url,
        )
    if not parsed.netloc:
        raise InvalidInputError(f"Invalid URL format: {url}", value=url)
    return url


def resolve_options(
    options: ExtractionOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> ExtractionOptions:
    """Build :class:`ExtractionOptions` from a model, a mapping and/or kwargs.

    Mapping keys may use snake_case or the camelCase names of the tool
    schema (``contentFormat``, ``maxContentLength`` ...).
    """
    if isinstance(options, ExtractionOptions):
        if not overrides:
            return options
        data: dict[str, Any] = options.model_dump(exclude_unset=True)
    elif options is None:
        data = {}
    elif isinstance(options, Mapping):
        data = dict(options)
    else:
        raise InvalidInputError(f"options must be a mapping, got {type(options).__name__}", value=repr(options))
    data.update(overrides)

    try:
        return ExtractionOptions.model_validate(data)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ())) or "options"
        value = err.get("input")
        raise InvalidInputError(
            f"Invalid value for {field}: {value!r} ({err.get('msg', 'invalid')})",
            value=value if isinstance(value, (str, int, float, bool)) else repr(value),
        ) from exc


# ---------------------------------------------------------------------------
# Low-level HTTP fetch
# ---------------------------------------------------------------------------

class PageResponse(NamedTuple):
    html: str
    final_url: str
    status_code: int


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    def __init__(self, max_redirects: int) -> None:
        super().__init__()
        self.max_redirections = max_redirects


def _decode_response_body(raw: bytes, headers: Any, url: str) -> str:
    encoding = ""
    if headers is not None:
        encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()

    try:
        if encoding == "gzip":
            raw = gzip.decompress(raw)
        elif encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc

    charset = "utf-8"
    if headers is not None:
        try:
            charset = headers.get_content_charset("utf-8") or "utf-8"
        except AttributeError:
            charset = "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except (LookupError, ValueError):
        return raw.decode("utf-8", errors="replace")


def _content_type(headers: Any) -> str:
    try:
        return headers.get_content_type().lower()
    except AttributeError:
        raw = str(headers.get("Content-Type", "") if headers is not None else "")
        return raw.split(";")[0].strip().lower()


def fetch_page(
    url: str,
    *,
    timeout: int | None = None,
    user_agent: str | None = None,
    max_redirects: int | None = None,
) -> PageResponse:
    """Fetch *url* and return its HTML, the post-redirect URL and the status.

    Redirects are followed up to *max_redirects* hops.  There is no retry:
    every failure is terminal and raised as :class:`FetchError`.

    Raises:
        FetchError: ``kind`` is one of invalid_url, timeout,
            too_many_redirects, http_error, wrong_content_type, network.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FetchError(f"Unsupported or invalid URL: {url!r}", url=url, kind="invalid_url")

    timeout = timeout or settings.TIMEOUT
    hops = max_redirects if max_redirects is not None else settings.MAX_REDIRECTS

    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or settings.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9,fr;q=0.8",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        },
    )
    opener = urllib.request.build_opener(_LimitedRedirectHandler(hops))

    try:
        with opener.open(req, timeout=timeout) as resp:
            final_url = resp.geturl() or url
            status = int(getattr(resp, "status", 200) or 200)
            content_type = _content_type(resp.headers)
            if content_type not in _HTML_CONTENT_TYPES:
                raise FetchError(
                    f"Expected HTML content, got: {content_type or 'unknown'}",
                    url=final_url,
                    status=status,
                    kind="wrong_content_type",
                )
            html = _decode_response_body(resp.read(), resp.headers, final_url)

    except urllib.error.HTTPError as exc:
        if exc.code in _REDIRECT_CODES:
            raise FetchError(
                f"Too many redirects (max {hops}) fetching {url}",
                url=url,
                status=exc.code,
                kind="too_many_redirects",
            ) from exc
        raise FetchError(
            f"HTTP {exc.code} fetching {url}: {exc.reason}",
            url=url,
            status=exc.code,
            kind="http_error",
        ) from exc

    except urllib.error.URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise FetchError(
                f"Request timeout after {timeout}s fetching {url}", url=url, kind="timeout",
            ) from exc
        raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc

    except TimeoutError as exc:
        raise FetchError(
            f"Request timeout after {timeout}s fetching {url}", url=url, kind="timeout",
        ) from exc

    except OSError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc

    logger.debug("fetched %s (%d, %d chars) -> %s", url, status, len(html), final_url)
    return PageResponse(html=html, final_url=final_url, status_code=status)


# ---------------------------------------------------------------------------
# Extraction (pure HTML → StructuredResult, no network)
# ---------------------------------------------------------------------------

def _shape_content(
    text: str | None,
    html: str | None,
    max_length: int | None,
) -> ExtractedContent:
    """Apply *max_length* to the rendered text and markup independently.

    ``truncated`` reports the text only; a cut to the markup is flagged
    separately by ``html_truncated``.
    """
    text_length = len(text) if text is not None else None
    html_length = len(html) if html is not None else None
    truncated = html_truncated = False

    if max_length is not None:
        if text is not None and len(text) > max_length:
            text = text[:max_length]
            truncated = True
        if html is not None and len(html) > max_length:
            html = html[:max_length]
            html_truncated = True

    return ExtractedContent(
        html=html,
        text=text,
        truncated=truncated,
        html_truncated=html_truncated,
        text_length=text_length,
        html_length=html_length,
    )


def extract(
    html: str,
    final_url: str = "",
    options: ExtractionOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> StructuredResult:
    """Extract a :class:`StructuredResult` from *html*.

    No network requests are made.  Sub-extractor failures degrade to empty
    values; the only exception raised is :class:`InvalidInputError` for bad
    options.

    Args:
        html:      Raw HTML string of the page.
        final_url: URL the HTML was served from (after redirects); used as the
                   base for every relative link.
        options:   :class:`ExtractionOptions` or a mapping of option values.
        **overrides: Individual option values, applied on top of *options*.

    Returns:
        :class:`~pagedigest.items.StructuredResult` shaped by the mode.
    """
    opts = resolve_options(options, **overrides)
    html = html or ""

    try:
        metadata = read_metadata(html)
    except Exception as exc:
        logger.warning("metadata extraction failed for %s: %s", final_url, exc)
        metadata = None

    text: str | None = None
    markup: str | None = None
    if opts.wants_text or opts.wants_html:
        result = extract_main_content(html, final_url)
        if result.rejected:
            logger.debug("content for %s via %s after %s", final_url, result.method, result.rejected)
        markup = result.html if opts.wants_html else None
        if opts.wants_text:
            text = markup_to_text(result.html)

    content = _shape_content(text, markup, opts.max_content_length)

    return StructuredResult(
        url=final_url,
        mode=opts.mode,
        metadata=metadata,
        content=content,
        related_links=extract_related_links(html, final_url) if opts.wants_related_links else None,
        navigation_links=(
            extract_navigation_links(html, final_url) if opts.wants_navigation_links else None
        ),
        issues=detect_issues(html) if opts.wants_issues else None,
    )


# ---------------------------------------------------------------------------
# Main public API
# ---------------------------------------------------------------------------

def fetch(
    url: str,
    options: ExtractionOptions | Mapping[str, Any] | None = None,
    *,
    timeout: int | None = None,
    user_agent: str | None = None,
    **overrides: Any,
) -> StructuredResult:
    """Fetch *url* and return its :class:`~pagedigest.items.StructuredResult`.

    Options are validated before any network traffic, so a bad mode fails
    fast with :class:`InvalidInputError`.

    Raises:
        InvalidInputError: malformed URL, unsupported scheme, bad option.
        FetchError: the page could not be fetched.

    Example::

        result = fetch("https://example.com/docs/intro", mode="light",
                       extract_navigation_links=True)
    """
    url = validate_url(url)
    opts = resolve_options(options, **overrides)
    logger.info("fetch: %s (mode=%s)", url, opts.mode)

    page = fetch_page(url, timeout=timeout, user_agent=user_agent)
    return extract(page.html, page.final_url, opts)


def fetch_payload(url: str, **kwargs: Any) -> dict[str, Any]:
    """Run :func:`fetch` and return a JSON-ready dict.

    Never raises: the result is either the payload or ``{"error": {...}}``
    with a ``kind`` and ``message``.
    """
    try:
        return fetch(url, **kwargs).to_payload()
    except PageDigestError as exc:
        logger.info("fetch_payload: %s error for %s: %s", exc.kind, url, exc)
        return {"error": exc.to_dict()}
    except Exception as exc:
        logger.exception("fetch_payload: unexpected failure for %s", url)
        return {"error": PageDigestError(f"Internal error: {exc}").to_dict()}
