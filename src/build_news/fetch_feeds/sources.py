"""Source definitions derived from configuration."""

import logging
from urllib.parse import quote, quote_plus

from build_news.config import Config
from build_news.models import SourceSpec

logger = logging.getLogger(__name__)

YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml"
GOOGLE_NEWS_SEARCH_URL = "https://news.google.com/rss/search"

YOUTUBE_LABEL = "YouTube"
BANDCAMP_LABEL = "Bandcamp"
NEWS_SEARCH_LABEL = "Google News"


def youtube_channel_feed_url(channel_id: str) -> str:
    return f"{YOUTUBE_FEED_URL}?channel_id={quote(channel_id)}"


def uploads_playlist_id(channel_id: str) -> str | None:
    """Map a channel id (UC...) to its uploads playlist id (UU...)."""
    if not channel_id.startswith("UC") or len(channel_id) <= 2:
        return None
    return "UU" + channel_id[2:]


def youtube_uploads_feed_url(channel_id: str) -> str | None:
    playlist_id = uploads_playlist_id(channel_id)
    if playlist_id is None:
        return None
    return f"{YOUTUBE_FEED_URL}?playlist_id={quote(playlist_id)}"


def bandcamp_origin(subdomain: str) -> str:
    return f"https://{subdomain}.bandcamp.com"


def news_search_url(subject: str, query_terms: list[str]) -> str:
    """Build a Google News RSS search URL for the subject name."""
    query = f'"{subject}"'
    if query_terms:
        query += " (" + " OR ".join(query_terms) + ")"
    return f"{GOOGLE_NEWS_SEARCH_URL}?q={quote_plus(query)}&hl=en-US&gl=US&ceid=US:en"


def build_sources(config: Config) -> list[SourceSpec]:
    """List every source to fetch this run, in a fixed order."""
    sources = []

    for channel_id in config.youtube.channel_ids:
        sources.append(SourceSpec(
            label=YOUTUBE_LABEL, url=youtube_channel_feed_url(channel_id), kind="feed", trusted=True,
        ))
        if config.youtube.include_uploads_playlist:
            uploads_url = youtube_uploads_feed_url(channel_id)
            if uploads_url is None:
                logger.warning("Channel id %s has no uploads playlist; skipping", channel_id)
            else:
                sources.append(SourceSpec(label=YOUTUBE_LABEL, url=uploads_url, kind="feed", trusted=True))

    if config.bandcamp.subdomain:
        origin = bandcamp_origin(config.bandcamp.subdomain)
        if config.bandcamp.mode == "feed":
            sources.append(SourceSpec(label=BANDCAMP_LABEL, url=f"{origin}/feed", kind="feed", trusted=True))
        else:
            sources.append(SourceSpec(label=BANDCAMP_LABEL, url=f"{origin}/music", kind="catalog", trusted=True))

    for label, url in config.press_feeds.items():
        sources.append(SourceSpec(label=label, url=url, kind="feed", trusted=False))

    if config.news_search.enabled:
        sources.append(SourceSpec(
            label=NEWS_SEARCH_LABEL,
            url=news_search_url(config.subject.name, config.news_search.query_terms),
            kind="feed",
            trusted=False,
        ))

    return sources
