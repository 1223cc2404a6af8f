"""URL resolution and normalization utilities."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse, urlunparse

_WEB_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def resolve_url(href: str, base_url: str) -> str | None:
    """Resolve *href* against *base_url* and return an absolute http(s) URL.

    Returns None for unparseable hrefs and non-web schemes (``mailto:``,
    ``javascript:``, ``data:`` ...).
    """
    try:
        absolute = urljoin(base_url, href.strip())
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme.lower() not in _WEB_SCHEMES or not parsed.netloc:
        return None
    return absolute


def normalize_url(url: str) -> str:
    """Return the comparison form of *url* used for link deduplication.

    Transformations applied:
    - Strip the fragment
    - Strip a trailing slash from the path (the root path ``/`` is kept)
    - Lowercase the whole URL
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return url.lower()

    path = parsed.path or ("/" if parsed.netloc else "")
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    normalized = urlunparse(parsed._replace(path=path, fragment=""))
    return normalized.lower()


def extract_domain(url: str) -> str:
    """Return the host component of a URL, lowercased and without port."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_same_domain(url: str, base_domain: str) -> bool:
    """True if *url* lives on *base_domain* or one of its subdomains."""
    host = extract_domain(url)
    if not host or not base_domain:
        return False
    return host == base_domain or host.endswith("." + base_domain)


def is_same_page_anchor(url: str, base_url: str) -> bool:
    """True if *url* only points at a fragment of the page at *base_url*."""
    try:
        target = urlparse(url)
        base = urlparse(base_url)
    except ValueError:
        return False
    return bool(target.fragment) and (target.path or "/") == (base.path or "/")
