"""Pydantic models for extraction options and results."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel

ExtractionMode = Literal["light", "standard", "full"]
ContentFormat = Literal["text", "html", "both"]
RelatedLinkType = Literal["see_also", "related", "redirect"]
IssueType = Literal["paywall", "login_required", "partial_content", "other"]


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

class PageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    author: str | None = None
    published_date: str | None = None


class RelatedLink(BaseModel):
    """A contextual link the page presents as "see also" / "related"."""

    model_config = ConfigDict(frozen=True)

    url: str
    text: str = Field(max_length=100)
    type: RelatedLinkType = "related"


class NavigationLink(BaseModel):
    """A link from the page's sidebar, menu or table of contents."""

    model_config = ConfigDict(frozen=True)

    url: str
    text: str = Field(max_length=100)
    level: PositiveInt | None = None  # enclosing <ul>/<ol> count


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: IssueType
    message: str


class ExtractedContent(BaseModel):
    html: str | None = None
    text: str | None = None
    truncated: bool = False
    html_truncated: bool = False
    # Lengths before max_content_length was applied
    text_length: int | None = None
    html_length: int | None = None


class StructuredResult(BaseModel):
    """Everything extracted from one page, shaped by the requested mode.

    Fields the mode does not select stay ``None``; :meth:`to_payload` drops
    them so the caller-facing JSON only carries what was asked for.
    """

    url: str
    mode: ExtractionMode = "standard"
    metadata: PageMetadata | None = None
    content: ExtractedContent = Field(default_factory=ExtractedContent)
    related_links: list[RelatedLink] | None = None
    navigation_links: list[NavigationLink] | None = None
    issues: list[Issue] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready dict with unselected fields removed."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class ExtractionOptions(BaseModel):
    """Caller-supplied knobs for :func:`pagedigest.query.extract`.

    ``detect_issues`` and ``extract_related_links`` default to ``None``,
    meaning "whatever the mode does by default": on for standard/full, off
    for light.  Each field also accepts its camelCase name
    (``contentFormat``, ``maxContentLength`` ...).
    """

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    mode: ExtractionMode = "standard"
    content_format: ContentFormat = "text"
    max_content_length: PositiveInt | None = None
    detect_issues: bool | None = None
    extract_related_links: bool | None = None
    extract_navigation_links: bool = False

    @field_validator("mode", "content_format", mode="before")
    @classmethod
    def normalise_choice(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def wants_text(self) -> bool:
        return self.mode == "full" or self.content_format in ("text", "both")

    @property
    def wants_html(self) -> bool:
        return self.mode == "full" or self.content_format in ("html", "both")

    @property
    def wants_issues(self) -> bool:
        if self.detect_issues is not None:
            return self.detect_issues
        return self.mode != "light"

    @property
    def wants_related_links(self) -> bool:
        if self.extract_related_links is not None:
            return self.extract_related_links
        return self.mode != "light"

    @property
    def wants_navigation_links(self) -> bool:
        return self.extract_navigation_links
