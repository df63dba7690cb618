"""Tests for build_news.fetch_feeds.sources module."""

from urllib.parse import parse_qs, urlparse

from build_news.config import Config
from build_news.fetch_feeds.sources import (
    build_sources,
    news_search_url,
    uploads_playlist_id,
    youtube_channel_feed_url,
)


class TestYoutubeUrls:
    def test_channel_feed_url(self) -> None:
        assert youtube_channel_feed_url("UCabc") == "https://www.youtube.com/feeds/videos.xml?channel_id=UCabc"

    def test_uploads_playlist_id(self) -> None:
        assert uploads_playlist_id("UCabc123") == "UUabc123"

    def test_uploads_playlist_requires_uc_prefix(self) -> None:
        assert uploads_playlist_id("HCabc") is None
        assert uploads_playlist_id("UC") is None


class TestNewsSearchUrl:
    def test_encodes_subject_and_terms(self) -> None:
        url = news_search_url("OSIAH", ["band", "album"])
        query = parse_qs(urlparse(url).query)
        assert query["q"] == ['"OSIAH" (band OR album)']
        assert query["hl"] == ["en-US"]

    def test_without_terms(self) -> None:
        query = parse_qs(urlparse(news_search_url("OSIAH", [])).query)
        assert query["q"] == ['"OSIAH"']


class TestBuildSources:
    def test_builds_all_source_kinds(self) -> None:
        config = Config()
        config.youtube.channel_ids = ["UCabc"]
        config.bandcamp.subdomain = "osiah"
        config.press_feeds = {"Metal Injection": "https://metalinjection.net/feed"}

        sources = build_sources(config)

        assert [(s.label, s.kind, s.trusted) for s in sources] == [
            ("YouTube", "feed", True),
            ("YouTube", "feed", True),
            ("Bandcamp", "catalog", True),
            ("Metal Injection", "feed", False),
            ("Google News", "feed", False),
        ]
        assert sources[1].url.endswith("playlist_id=UUabc")
        assert sources[2].url == "https://osiah.bandcamp.com/music"

    def test_bandcamp_feed_mode(self) -> None:
        config = Config()
        config.bandcamp.subdomain = "osiah"
        config.bandcamp.mode = "feed"
        config.news_search.enabled = False

        sources = build_sources(config)

        assert [(s.url, s.kind) for s in sources] == [("https://osiah.bandcamp.com/feed", "feed")]

    def test_skips_uploads_feed_when_disabled(self) -> None:
        config = Config()
        config.youtube.channel_ids = ["UCabc"]
        config.youtube.include_uploads_playlist = False
        config.news_search.enabled = False

        assert len(build_sources(config)) == 1

    def test_empty_config_only_searches(self) -> None:
        sources = build_sources(Config())
        assert [s.label for s in sources] == ["Google News"]
