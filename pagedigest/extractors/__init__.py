"""Extraction sub-package: pure HTML-in, records-out page analysis."""

from .issues import detect_issues
from .links import extract_related_links
from .main_content import extract_main_content, isolate_main_content
from .metadata import read_metadata
from .navigation import extract_navigation_links
from .text import markup_to_text, render_text
from .urlnorm import normalize_url, resolve_url

__all__ = [
    "detect_issues",
    "extract_main_content",
    "extract_navigation_links",
    "extract_related_links",
    "isolate_main_content",
    "markup_to_text",
    "normalize_url",
    "read_metadata",
    "render_text",
    "resolve_url",
]
