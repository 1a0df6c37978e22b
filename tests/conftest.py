"""Shared fixtures for podcaster tests."""

from collections import Counter
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from podcaster.config.schema import PodcastConfig
from podcaster.utils.retry import TEST_RETRY_CONFIG

DEFAULT_PUB_DATE = "Mon, 06 Jan 2025 10:00:00 GMT"


def _rss_item(
    title: str,
    url: str | None,
    guid: str | None = None,
    pub_date: str | None = DEFAULT_PUB_DATE,
    mime: str = "audio/mpeg",
) -> str:
    parts = [f"<title>{title}</title>"]
    if guid is not None:
        parts.append(f'<guid isPermaLink="false">{guid}</guid>')
    if pub_date is not None:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    if url is not None:
        parts.append(f'<enclosure url="{url}" length="1234" type="{mime}"/>')
    return "<item>" + "".join(parts) + "</item>"


def _build_rss(items: list[str], title: str = "Test Podcast") -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.com</link>"
        "<description>Test feed</description>" + "".join(items) + "</channel></rss>"
    ).encode("utf-8")


@pytest.fixture
def rss_item() -> Callable[..., str]:
    """Factory for a single RSS <item> element."""
    return _rss_item


@pytest.fixture
def build_rss() -> Callable[..., bytes]:
    """Factory for a complete RSS document from item strings."""
    return _build_rss


class FakePodcastServer:
    """In-memory HTTP server for httpx.MockTransport.

    Routes map a full URL to a response, or to an exception raised in
    place of a response. Every request is counted by URL.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes, dict] | Exception] = {}
        self.requests: Counter[str] = Counter()

    def add(self, url: str, status: int = 200, content: bytes = b"", headers=None) -> None:
        self.routes[url] = (status, content, headers or {})

    def add_feed(self, url: str, content: bytes) -> None:
        self.add(url, content=content, headers={"Content-Type": "application/rss+xml"})

    def add_error(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests[url] += 1
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(route, Exception):
            raise route
        status, content, headers = route
        return httpx.Response(status, content=content, headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def media_requests(self) -> int:
        return sum(n for url, n in self.requests.items() if url.endswith(".mp3"))


@pytest.fixture
def server() -> FakePodcastServer:
    """Fake HTTP server shared by a test's clients."""
    return FakePodcastServer()


@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("podcaster.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    return tmp_path / "media"


@pytest.fixture
def podcast() -> PodcastConfig:
    return PodcastConfig(id="show", url="https://feeds.example.com/show.rss")


@pytest.fixture
def sample_settings_dict(tmp_path: Path) -> dict:
    """Settings file contents in the JSON layout."""
    return {
        "config": {"mediaDir": str(tmp_path / "media")},
        "podcasts": [
            {"id": "first", "url": "https://feeds.example.com/first.rss"},
            {"id": "second", "url": "https://feeds.example.com/second.rss"},
        ],
    }
