"""Tests for feed parsing and retrieval."""

from datetime import datetime, timezone

import httpx
import pytest

from podcaster.feeds.parser import RSSParser, parse_feed
from podcaster.utils.errors import FeedFetchError, FeedParseError
from podcaster.utils.retry import TEST_RETRY_CONFIG

FEED_URL = "https://feeds.example.com/show.rss"


class TestParseFeed:
    """Tests for parse_feed."""

    def test_extracts_episode_fields(self, rss_item, build_rss) -> None:
        """Test title, guid, date and enclosure URL are extracted."""
        feed = build_rss(
            [rss_item("Episode 1", "https://cdn.example.com/ep1.mp3", guid="guid-1")]
        )

        episodes = parse_feed(feed)

        assert len(episodes) == 1
        episode = episodes[0]
        assert episode.title == "Episode 1"
        assert episode.guid == "guid-1"
        assert episode.media_url == "https://cdn.example.com/ep1.mp3"
        assert episode.published == datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc)

    def test_only_audio_mpeg_enclosures_qualify(self, rss_item, build_rss) -> None:
        """Test an item with only a video enclosure is dropped."""
        feed = build_rss(
            [
                rss_item("Audio", "https://cdn.example.com/audio.mp3", guid="a"),
                rss_item("Video", "https://cdn.example.com/video.mp4", guid="v", mime="video/mp4"),
            ]
        )

        episodes = parse_feed(feed)

        assert [e.title for e in episodes] == ["Audio"]

    def test_first_audio_enclosure_wins(self, build_rss) -> None:
        """Test the first audio/mpeg enclosure is used when several exist."""
        item = (
            "<item><title>Multi</title><guid>m</guid>"
            "<pubDate>Mon, 06 Jan 2025 10:00:00 GMT</pubDate>"
            '<enclosure url="https://cdn.example.com/m.mp4" type="video/mp4" length="1"/>'
            '<enclosure url="https://cdn.example.com/first.mp3" type="audio/mpeg" length="1"/>'
            '<enclosure url="https://cdn.example.com/second.mp3" type="audio/mpeg" length="1"/>'
            "</item>"
        )

        episodes = parse_feed(build_rss([item]))

        assert len(episodes) == 1
        assert episodes[0].media_url == "https://cdn.example.com/first.mp3"

    def test_item_without_enclosure_is_dropped(self, rss_item, build_rss) -> None:
        """Test items lacking an enclosure are excluded, not fatal."""
        feed = build_rss(
            [
                rss_item("No media", None, guid="x"),
                rss_item("Media", "https://cdn.example.com/m.mp3", guid="y"),
            ]
        )

        assert [e.title for e in parse_feed(feed)] == ["Media"]

    def test_item_with_bad_date_is_dropped(self, rss_item, build_rss) -> None:
        """Test items with an unparseable or missing date are excluded."""
        feed = build_rss(
            [
                rss_item("Bad date", "https://cdn.example.com/a.mp3", pub_date="not a date"),
                rss_item("No date", "https://cdn.example.com/b.mp3", pub_date=None),
                rss_item("Good", "https://cdn.example.com/c.mp3"),
            ]
        )

        assert [e.title for e in parse_feed(feed)] == ["Good"]

    def test_missing_guid_is_empty_string(self, rss_item, build_rss) -> None:
        """Test a missing guid yields an empty string."""
        feed = build_rss([rss_item("No guid", "https://cdn.example.com/a.mp3")])

        episodes = parse_feed(feed)

        assert episodes[0].guid == ""
        assert not episodes[0].has_guid

    def test_preserves_document_order(self, rss_item, build_rss) -> None:
        """Test episodes come back in feed order, not sorted by date."""
        feed = build_rss(
            [
                rss_item("Older", "https://cdn.example.com/1.mp3",
                         pub_date="Mon, 01 Jan 2024 10:00:00 GMT"),
                rss_item("Newer", "https://cdn.example.com/2.mp3",
                         pub_date="Mon, 06 Jan 2025 10:00:00 GMT"),
                rss_item("Middle", "https://cdn.example.com/3.mp3",
                         pub_date="Sat, 01 Jun 2024 10:00:00 GMT"),
            ]
        )

        assert [e.title for e in parse_feed(feed)] == ["Older", "Newer", "Middle"]

    def test_relative_enclosure_url_is_dropped(self, rss_item, build_rss) -> None:
        """Test enclosure URLs must be absolute."""
        feed = build_rss([rss_item("Relative", "/media/ep.mp3")])

        assert parse_feed(feed) == []

    def test_malformed_xml_raises(self) -> None:
        """Test malformed XML raises FeedParseError."""
        with pytest.raises(FeedParseError, match="Malformed"):
            parse_feed(b"<rss version='2.0'><channel><item><title>oops</channel>")

    def test_non_feed_document_raises(self) -> None:
        """Test a well-formed document that isn't a feed raises FeedParseError."""
        with pytest.raises(FeedParseError):
            parse_feed(b"<html><body><p>Hello</p></body></html>")

    def test_rss_without_channel_raises(self) -> None:
        """Test an <rss> root with no channel is not accepted as an empty feed."""
        with pytest.raises(FeedParseError, match="no channel"):
            parse_feed(b'<?xml version="1.0"?><rss version="2.0"></rss>')

    def test_empty_channel_has_no_episodes(self, build_rss) -> None:
        """Test a channel with a title but no items parses to an empty list."""
        assert parse_feed(build_rss([])) == []


class TestRSSParser:
    """Tests for RSSParser feed retrieval."""

    @pytest.fixture
    def parser(self) -> RSSParser:
        return RSSParser(retry_config=TEST_RETRY_CONFIG)

    @pytest.mark.asyncio
    async def test_fetch_episodes(self, parser, server, rss_item, build_rss) -> None:
        """Test fetching and parsing a feed over HTTP."""
        server.add_feed(
            FEED_URL, build_rss([rss_item("Ep", "https://cdn.example.com/ep.mp3", guid="g")])
        )

        async with server.client() as client:
            episodes = await parser.fetch_episodes(client, FEED_URL)

        assert [e.guid for e in episodes] == ["g"]

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, parser, server) -> None:
        """Test a 404 fails immediately with FeedFetchError."""
        async with server.client() as client:
            with pytest.raises(FeedFetchError, match="404"):
                await parser.fetch_feed(client, FEED_URL)

        assert server.requests[FEED_URL] == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, parser, server) -> None:
        """Test 5xx responses are retried up to max attempts."""
        server.add(FEED_URL, status=503, content=b"busy")

        async with server.client() as client:
            with pytest.raises(FeedFetchError):
                await parser.fetch_feed(client, FEED_URL)

        assert server.requests[FEED_URL] == TEST_RETRY_CONFIG.max_attempts

    @pytest.mark.asyncio
    async def test_connection_error_becomes_fetch_error(self, parser, server) -> None:
        """Test transport errors are retried then raised as FeedFetchError."""
        server.add_error(FEED_URL, httpx.ConnectError("connection refused"))

        async with server.client() as client:
            with pytest.raises(FeedFetchError, match="connection refused"):
                await parser.fetch_feed(client, FEED_URL)

        assert server.requests[FEED_URL] == TEST_RETRY_CONFIG.max_attempts

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(
        self, parser, server, rss_item, build_rss
    ) -> None:
        """Test a transient failure followed by success returns the feed."""
        feed = build_rss([rss_item("Ep", "https://cdn.example.com/ep.mp3")])
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(502)
            return httpx.Response(200, content=feed)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            content = await parser.fetch_feed(client, FEED_URL)

        assert content == feed
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_follows_feed_redirects(self, parser, server, rss_item, build_rss) -> None:
        """Test feed requests follow HTTP redirects."""
        moved = "https://feeds.example.com/moved.rss"
        server.add(FEED_URL, status=301, headers={"Location": moved})
        server.add_feed(moved, build_rss([rss_item("Ep", "https://cdn.example.com/ep.mp3")]))

        async with server.client() as client:
            episodes = await parser.fetch_episodes(client, FEED_URL)

        assert len(episodes) == 1

    @pytest.mark.asyncio
    async def test_redirect_loop_becomes_fetch_error(self, parser, server) -> None:
        """Test a feed redirecting to itself fails as FeedFetchError without retries."""
        server.add(FEED_URL, status=302, headers={"Location": FEED_URL})

        async with server.client() as client:
            with pytest.raises(FeedFetchError, match="TooManyRedirects"):
                await parser.fetch_feed(client, FEED_URL)

    @pytest.mark.asyncio
    async def test_unparseable_feed_raises_parse_error(self, parser, server) -> None:
        """Test a fetched document that isn't a feed raises FeedParseError."""
        server.add(FEED_URL, content=b"<html><body>Not a feed</body></html>")

        async with server.client() as client:
            with pytest.raises(FeedParseError):
                await parser.fetch_episodes(client, FEED_URL)
