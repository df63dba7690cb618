"""RSS 2.0 / Atom feed parsing into candidate items."""

import io
import logging
from datetime import datetime
from typing import Optional, Union
from urllib.parse import urlparse

import feedparser

from build_news.fetch_feeds.extract import decode_entities, strip_markup
from build_news.models import CandidateItem
from common.datetime import parse_published

logger = logging.getLogger(__name__)

YOUTUBE_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}


def parse_feed(content: Union[str, bytes], source_label: str, captured_at: datetime) -> list[CandidateItem]:
    """Parse RSS or Atom content into candidate items.

    Raw bytes are decoded by feedparser from the feed's own XML
    declaration; already-decoded text is treated as UTF-8.

    Entries are converted one at a time; a malformed entry is skipped
    without affecting the rest of the feed. Entries without a title or
    link are dropped.
    """
    if not content or not content.strip():
        return []

    # A stream is never mistaken for a URL or a local path
    if isinstance(content, bytes):
        feed = feedparser.parse(io.BytesIO(content))
    else:
        feed = feedparser.parse(
            io.BytesIO(content.encode("utf-8")),
            response_headers={"content-type": "application/xml; charset=utf-8"},
        )
    if feed.bozo and not feed.entries:
        logger.warning("Unparseable feed for %s: %s", source_label, feed.get("bozo_exception"))
        return []

    logger.debug("Parsing %d %s entries for %s", len(feed.entries), feed.version or "unknown", source_label)

    items = []
    for entry in feed.entries:
        try:
            item = parse_entry(entry, source_label, captured_at)
        except Exception as e:
            logger.warning("Failed to parse entry from %s: %s", source_label, e)
            continue
        if item is not None:
            items.append(item)
    return items


def parse_entry(entry, source_label: str, captured_at: datetime) -> Optional[CandidateItem]:
    """Parse a single feed entry into a CandidateItem."""
    title = strip_markup(entry.get("title", ""))
    url = normalize_youtube_link(decode_entities(entry.get("link", "")).strip())
    if not title or not url:
        logger.debug("Dropping entry without title or link from %s", source_label)
        return None

    published_at = _parse_published_date(entry) or captured_at
    excerpt = strip_markup(entry.get("summary", "") or entry.get("description", ""))

    # Aggregator feeds name the publisher in <source url="...">
    origin = entry.get("source") or {}

    return CandidateItem(
        title=title,
        url=url,
        published_at=published_at,
        excerpt=excerpt,
        image_url=_pick_image(entry),
        source_label=source_label,
        origin_url=(origin.get("href") or "").strip(),
    )


def _parse_published_date(entry) -> Optional[datetime]:
    """Extract and parse the entry date, preferring ``updated`` over ``published``."""
    return parse_published(entry.get("updated")) or parse_published(entry.get("published"))


def _pick_image(entry) -> str:
    for key in ("media_thumbnail", "media_content"):
        for media in entry.get(key) or []:
            url = (media.get("url") or "").strip()
            if url:
                return url

    for enclosure in entry.get("enclosures") or []:
        if (enclosure.get("type") or "").lower().startswith("image/"):
            url = (enclosure.get("href") or enclosure.get("url") or "").strip()
            if url:
                return url
    return ""


def normalize_youtube_link(link: str) -> str:
    """Rewrite youtu.be/<id> short links to the canonical watch URL."""
    if not link:
        return link
    try:
        parsed = urlparse(link)
    except ValueError:
        return link
    if (parsed.hostname or "").lower() in YOUTUBE_SHORT_HOSTS:
        video_id = parsed.path.strip("/").split("/")[0]
        if video_id:
            return f"https://www.youtube.com/watch?v={video_id}"
    return link
