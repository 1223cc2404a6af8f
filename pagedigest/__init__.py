"""pagedigest - structured, bounded-size digests of single web pages.

Quick single-URL usage::

    from pagedigest import fetch

    result = fetch("https://example.com/blog/some-post")
    print(result.metadata.title)
    print(result.content.text)

Already have the HTML::

    from pagedigest import extract

    result = extract(html, "https://example.com/docs/intro",
                     mode="light", extract_navigation_links=True)
    payload = result.to_payload()
"""

from pagedigest.items import (
    ExtractedContent,
    ExtractionOptions,
    Issue,
    NavigationLink,
    PageMetadata,
    RelatedLink,
    StructuredResult,
)
from pagedigest.query import (
    FetchError,
    InvalidInputError,
    PageDigestError,
    extract,
    fetch,
    fetch_page,
    fetch_payload,
)

__version__ = "0.1.0"
__all__ = [
    "ExtractedContent",
    "ExtractionOptions",
    "FetchError",
    "InvalidInputError",
    "Issue",
    "NavigationLink",
    "PageDigestError",
    "PageMetadata",
    "RelatedLink",
    "StructuredResult",
    "extract",
    "fetch",
    "fetch_page",
    "fetch_payload",
]
