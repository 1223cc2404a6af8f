"""Runtime settings for pagedigest.

Every value can be overridden from the environment with a ``PAGEDIGEST_``
prefix, e.g. ``PAGEDIGEST_TIMEOUT=10``.  Values are read once at import time.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(f"PAGEDIGEST_{name}", "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring PAGEDIGEST_%s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring PAGEDIGEST_%s=%r: must be positive", name, raw)
        return default
    return value


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------

# Request timeout in seconds
TIMEOUT = _env_int("TIMEOUT", 30)

# Redirect hops followed before the fetch fails
MAX_REDIRECTS = _env_int("MAX_REDIRECTS", 5)

USER_AGENT = os.getenv("PAGEDIGEST_USER_AGENT") or (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Extraction limits
# ---------------------------------------------------------------------------

# Upper bound on elements visited by full-document scans (div fallback,
# anchor sweeps).  Keeps adversarial pages from blowing up traversal cost.
MAX_SCAN_NODES = _env_int("MAX_SCAN_NODES", 50_000)

MAX_RELATED_LINKS = 20
MAX_CONTENT_RELATED_LINKS = 10
MAX_NAVIGATION_LINKS = 50
MAX_LINK_TEXT = 100
