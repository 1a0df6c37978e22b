"""Episode download module for podcaster."""

from podcaster.audio.downloader import MAX_REDIRECTS, EpisodeDownloader

__all__ = [
    "EpisodeDownloader",
    "MAX_REDIRECTS",
]
