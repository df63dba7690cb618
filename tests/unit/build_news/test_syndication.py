"""Tests for build_news.fetch_feeds.syndication module."""

from datetime import datetime, timezone
from unittest.mock import patch

from build_news.fetch_feeds.syndication import normalize_youtube_link, parse_feed
from build_news.models import CandidateItem

CAPTURED_AT = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

YOUTUBE_ATOM = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015"
      xmlns:media="http://search.yahoo.com/mrss/"
      xmlns="http://www.w3.org/2005/Atom">
  <title>OSIAH</title>
  <entry>
    <id>yt:video:abc123</id>
    <yt:videoId>abc123</yt:videoId>
    <title>OSIAH - Loathe (Official Video)</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v=abc123"/>
    <published>2024-03-01T17:00:00+00:00</published>
    <updated>2024-03-02T09:00:00+00:00</updated>
    <media:group>
      <media:thumbnail url="https://i4.ytimg.com/vi/abc123/hqdefault.jpg" width="480" height="360"/>
    </media:group>
  </entry>
  <entry>
    <id>yt:video:xyz789</id>
    <title>OSIAH - Live at Bloodstock</title>
    <link href="https://youtu.be/xyz789"/>
    <updated>2024-02-10T08:00:00+00:00</updated>
  </entry>
</feed>
"""

PRESS_RSS = """<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
  <title>Metal Injection</title>
  <item>
    <title>OSIAH — New Single 'X'</title>
    <link>https://metalinjection.net/news/osiah-x</link>
    <pubDate>Tue, 05 Mar 2024 14:00:00 GMT</pubDate>
    <description><![CDATA[<p>The deathcore band drops a new <b>single</b>.</p>]]></description>
    <enclosure url="https://metalinjection.net/img/x.jpg" type="image/jpeg" length="1234"/>
  </item>
  <item>
    <title></title>
    <link>https://metalinjection.net/news/untitled</link>
  </item>
  <item>
    <title>Undated OSIAH news</title>
    <link>https://metalinjection.net/news/undated</link>
    <pubDate>sometime soon</pubDate>
    <media:content url="https://metalinjection.net/img/undated.jpg" medium="image"/>
  </item>
  <item>
    <title>Audio only</title>
    <link>https://metalinjection.net/news/audio</link>
    <enclosure url="https://metalinjection.net/a.mp3" type="audio/mpeg" length="1"/>
  </item>
</channel>
</rss>
"""


class TestParseFeedAtom:
    def test_parses_entries_in_order(self) -> None:
        items = parse_feed(YOUTUBE_ATOM, "YouTube", CAPTURED_AT)
        assert [i.title for i in items] == ["OSIAH - Loathe (Official Video)", "OSIAH - Live at Bloodstock"]
        assert all(i.source_label == "YouTube" for i in items)

    def test_uses_alternate_link_and_thumbnail(self) -> None:
        item = parse_feed(YOUTUBE_ATOM, "YouTube", CAPTURED_AT)[0]
        assert item.url == "https://www.youtube.com/watch?v=abc123"
        assert item.image_url == "https://i4.ytimg.com/vi/abc123/hqdefault.jpg"

    def test_prefers_updated_over_published(self) -> None:
        item = parse_feed(YOUTUBE_ATOM, "YouTube", CAPTURED_AT)[0]
        assert item.published_at == datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)

    def test_uses_updated_and_first_link(self) -> None:
        item = parse_feed(YOUTUBE_ATOM, "YouTube", CAPTURED_AT)[1]
        assert item.published_at == datetime(2024, 2, 10, 8, 0, tzinfo=timezone.utc)
        assert item.url == "https://www.youtube.com/watch?v=xyz789"


class TestParseFeedRss:
    def test_drops_items_without_title(self) -> None:
        items = parse_feed(PRESS_RSS, "Metal Injection", CAPTURED_AT)
        assert "https://metalinjection.net/news/untitled" not in [i.url for i in items]
        assert len(items) == 3

    def test_extracts_fields(self) -> None:
        item = parse_feed(PRESS_RSS, "Metal Injection", CAPTURED_AT)[0]
        assert item.title == "OSIAH — New Single 'X'"
        assert item.url == "https://metalinjection.net/news/osiah-x"
        assert item.published_at == datetime(2024, 3, 5, 14, 0, tzinfo=timezone.utc)
        assert item.excerpt == "The deathcore band drops a new single."
        assert item.image_url == "https://metalinjection.net/img/x.jpg"

    def test_unparsable_date_defaults_to_capture_time(self) -> None:
        item = parse_feed(PRESS_RSS, "Metal Injection", CAPTURED_AT)[1]
        assert item.published_at == CAPTURED_AT
        assert item.image_url == "https://metalinjection.net/img/undated.jpg"

    def test_ignores_non_image_enclosures(self) -> None:
        item = parse_feed(PRESS_RSS, "Metal Injection", CAPTURED_AT)[2]
        assert item.image_url == ""
        assert item.excerpt == ""


LATIN1_RSS = (
    '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
    '<rss version="2.0"><channel><title>Rock Hard</title>'
    "<item><title>OSIAH live in Köln</title>"
    "<link>https://rockhard.example.de/osiah-koeln</link>"
    "<description>Konzertbericht aus Köln.</description></item>"
    "</channel></rss>"
).encode("iso-8859-1")

SEARCH_RSS = """<rss version="2.0"><channel>
  <title>"OSIAH" - Google News</title>
  <item>
    <title>OSIAH premiere video for Wither - Metal Injection</title>
    <link>https://news.google.com/rss/articles/CBMiQ2h0dHBzOi8vbWV0YWxpbmplY3Rpb24ubmV0?oc=5</link>
    <pubDate>Mon, 12 Feb 2024 10:00:00 GMT</pubDate>
    <source url="https://metalinjection.net">Metal Injection</source>
  </item>
  <item>
    <title>OSIAH announce tour</title>
    <link>https://news.google.com/rss/articles/CBMiOGh0dHBzOi8vZXhhbXBsZS5jb20?oc=5</link>
  </item>
</channel></rss>
"""


class TestParseFeedEncoding:
    def test_bytes_use_declared_encoding(self) -> None:
        item = parse_feed(LATIN1_RSS, "Rock Hard", CAPTURED_AT)[0]
        assert item.title == "OSIAH live in Köln"
        assert item.excerpt == "Konzertbericht aus Köln."

    def test_text_is_read_as_utf8(self) -> None:
        item = parse_feed(LATIN1_RSS.decode("iso-8859-1"), "Rock Hard", CAPTURED_AT)[0]
        assert item.title == "OSIAH live in Köln"

    def test_empty_bytes_return_nothing(self) -> None:
        assert parse_feed(b"", "Rock Hard", CAPTURED_AT) == []


class TestParseFeedPublisherSource:
    def test_keeps_publisher_url(self) -> None:
        item = parse_feed(SEARCH_RSS, "Google News", CAPTURED_AT)[0]
        assert item.url.startswith("https://news.google.com/rss/articles/")
        assert item.origin_url == "https://metalinjection.net"

    def test_missing_source_leaves_origin_empty(self) -> None:
        item = parse_feed(SEARCH_RSS, "Google News", CAPTURED_AT)[1]
        assert item.origin_url == ""


class TestParseFeedFaults:
    def test_empty_text_returns_nothing(self) -> None:
        assert parse_feed("", "YouTube", CAPTURED_AT) == []

    def test_garbage_returns_nothing(self) -> None:
        assert parse_feed("this is not a feed", "YouTube", CAPTURED_AT) == []

    def test_bad_entry_does_not_abort_feed(self) -> None:
        good = CandidateItem(
            title="OK", url="https://example.com/ok", published_at=CAPTURED_AT, source_label="YouTube",
        )
        with patch(
            "build_news.fetch_feeds.syndication.parse_entry",
            side_effect=[ValueError("bad entry"), good],
        ):
            items = parse_feed(YOUTUBE_ATOM, "YouTube", CAPTURED_AT)
        assert items == [good]


class TestNormalizeYoutubeLink:
    def test_rewrites_short_link(self) -> None:
        assert normalize_youtube_link("https://youtu.be/abc123") == "https://www.youtube.com/watch?v=abc123"

    def test_leaves_other_links(self) -> None:
        url = "https://www.youtube.com/watch?v=abc123"
        assert normalize_youtube_link(url) == url

    def test_empty_link(self) -> None:
        assert normalize_youtube_link("") == ""
