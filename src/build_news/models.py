"""Data models for the build_news pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from common.datetime import to_iso_utc


@dataclass
class SourceSpec:
    """One configured source: where to fetch it and how to parse it."""
    label: str
    url: str
    kind: str  # "feed" or "catalog"
    trusted: bool = False


@dataclass
class CandidateItem:
    """Parsed, not-yet-merged item from one source.

    ``published_at`` is None when the source gives no usable date.
    ``origin_url`` is the publisher's site when an aggregator feed
    names it separately from the item link.
    """
    title: str
    url: str
    published_at: Optional[datetime]
    excerpt: str = ""
    image_url: str = ""
    source_label: str = ""
    origin_url: str = ""


@dataclass
class SourceResult:
    """Outcome of one source task, successful or not."""
    source: SourceSpec
    candidates: list[CandidateItem] = field(default_factory=list)
    parsed: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class NewsRecord:
    """Final, persisted news entry."""
    id: str
    title: str
    url: str
    published_at: Optional[datetime]
    excerpt: str
    image_url: str
    source_label: str

    def to_dict(self, captured_at: datetime) -> dict:
        published_at = self.published_at or captured_at
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "publishedAt": to_iso_utc(published_at),
            "excerpt": self.excerpt or "",
            "imageUrl": self.image_url or "",
            "sourceLabel": self.source_label,
        }


@dataclass
class HarvestResult:
    captured_at: datetime
    records: list[NewsRecord]
    source_results: list[SourceResult]
