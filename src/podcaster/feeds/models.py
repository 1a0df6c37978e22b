"""Data models for podcast episodes."""

from datetime import datetime
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict


def media_file_name(url: str) -> str:
    """Last path segment of a media URL, without query string or fragment.

    Example:
        >>> media_file_name("https://cdn.example/shows/ep%201.mp3?id=9#t=30")
        'ep 1.mp3'
    """
    path = unquote(urlsplit(url).path)
    return PurePosixPath(path).name


class Episode(BaseModel):
    """Represents a single podcast episode."""

    model_config = ConfigDict(frozen=True)

    title: str
    media_url: str  # Absolute URL of the audio/mpeg enclosure
    guid: str = ""  # Empty when the feed omits it
    published: datetime

    @property
    def file_name(self) -> str:
        """File name the episode is stored under."""
        return media_file_name(self.media_url)

    @property
    def has_guid(self) -> bool:
        return bool(self.guid)
