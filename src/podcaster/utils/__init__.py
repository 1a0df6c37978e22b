"""Utility functions and helpers for podcaster."""

from podcaster.utils.errors import (
    ConfigError,
    ConfigNotFoundError,
    DownloadError,
    FeedError,
    FeedFetchError,
    FeedParseError,
    InvalidConfigError,
    NotFoundError,
    PodcasterError,
    PodcastNotFoundError,
    StateError,
)
from podcaster.utils.paths import get_settings_candidates, get_state_file

__all__ = [
    # Errors
    "PodcasterError",
    "ConfigError",
    "InvalidConfigError",
    "ConfigNotFoundError",
    "NotFoundError",
    "PodcastNotFoundError",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
    "DownloadError",
    "StateError",
    # Paths
    "get_settings_candidates",
    "get_state_file",
]
