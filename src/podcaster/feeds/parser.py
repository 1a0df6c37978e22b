"""RSS feed parser using feedparser."""

import io
import logging
import xml.sax
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

import feedparser
import httpx

from podcaster.feeds.models import Episode
from podcaster.utils.errors import FeedFetchError, FeedParseError
from podcaster.utils.retry import (
    ConnectionError,
    RetryableError,
    RetryConfig,
    TimeoutError,
    async_retrying,
    classify_http_error,
)

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/mpeg"


def parse_feed(xml_bytes: bytes) -> list[Episode]:
    """Parse a podcast feed into its episodes, in document order.

    Items without an ``audio/mpeg`` enclosure, or whose publication date
    cannot be parsed, are left out rather than failing the whole feed.

    Args:
        xml_bytes: Raw body of the feed response

    Returns:
        Episodes in feed order

    Raises:
        FeedParseError: If the document is not well-formed XML or not a feed
    """
    parsed = feedparser.parse(io.BytesIO(xml_bytes))

    if parsed.bozo and isinstance(parsed.get("bozo_exception"), xml.sax.SAXException):
        raise FeedParseError(f"Malformed feed XML: {parsed.bozo_exception}")

    version = parsed.get("version")
    if not version:
        raise FeedParseError("Document is not an RSS feed (no channel found)")

    # feedparser sets the version from the <rss> root alone
    if version.startswith("rss") and not parsed.feed and not parsed.entries:
        raise FeedParseError("RSS document has no channel")

    episodes = []
    for index, entry in enumerate(parsed.entries):
        episode = extract_episode(entry)
        if episode is None:
            logger.debug(f"Skipping feed item {index}: {entry.get('title', '<untitled>')!r}")
            continue
        episodes.append(episode)

    return episodes


def extract_episode(entry: Any) -> Episode | None:
    """Build an Episode from one feedparser entry, or None if it doesn't qualify."""
    media_url = _audio_enclosure_url(entry)
    if media_url is None:
        return None

    published_parsed = entry.get("published_parsed")
    if not published_parsed:
        return None

    return Episode(
        title=entry.get("title", ""),
        media_url=media_url,
        guid=entry.get("id", "") or "",
        published=datetime(*published_parsed[:6], tzinfo=timezone.utc),
    )


def _audio_enclosure_url(entry: Any) -> str | None:
    # First audio/mpeg enclosure wins; later ones are ignored
    for enclosure in entry.get("enclosures", []):
        if enclosure.get("type", "").strip().lower() != AUDIO_MIME_TYPE:
            continue
        url = (enclosure.get("href") or "").strip()
        parts = urlsplit(url)
        if parts.scheme in ("http", "https") and parts.netloc:
            return url
        return None
    return None


class RSSParser:
    """Fetches RSS feeds and extracts episode information."""

    def __init__(self, retry_config: RetryConfig | None = None) -> None:
        """Initialize the RSS parser.

        Args:
            retry_config: Backoff settings for transient fetch failures.
        """
        self.retry_config = retry_config

    async def fetch_feed(self, client: httpx.AsyncClient, url: str) -> bytes:
        """Download the raw feed document.

        Transient failures (timeouts, connection errors, 408/429/5xx) are
        retried with exponential backoff.

        Raises:
            FeedFetchError: If the feed cannot be retrieved
        """
        try:
            async for attempt in async_retrying(self.retry_config):
                with attempt:
                    return await self._get(client, url)
        except RetryableError as e:
            raise FeedFetchError(f"Failed to fetch feed {url}: {e}") from e

        raise FeedFetchError(f"Failed to fetch feed {url}")  # pragma: no cover

    async def fetch_episodes(self, client: httpx.AsyncClient, url: str) -> list[Episode]:
        """Fetch and parse a feed.

        Raises:
            FeedFetchError: If the feed cannot be retrieved
            FeedParseError: If the feed cannot be parsed
        """
        content = await self.fetch_feed(client, url)
        episodes = parse_feed(content)
        logger.debug(f"Parsed {len(episodes)} episode(s) from {url}")
        return episodes

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"{url}: {e}") from e
        except httpx.TransportError as e:
            raise ConnectionError(f"{url}: {type(e).__name__}: {e}") from e
        except httpx.HTTPError as e:
            # Redirect loops, undecodable bodies: retrying won't help
            raise FeedFetchError(f"Failed to fetch feed {url}: {type(e).__name__}: {e}") from e

        if not response.is_success:
            error = classify_http_error(response.status_code, url)
            if isinstance(error, RetryableError):
                raise error
            raise FeedFetchError(str(error))

        return response.content
