"""Settings loading and logging setup for podcaster."""

from podcaster.config.manager import SettingsManager, select_podcasts
from podcaster.config.schema import AppSettings, MediaConfig, PodcastConfig

__all__ = [
    "AppSettings",
    "MediaConfig",
    "PodcastConfig",
    "SettingsManager",
    "select_podcasts",
]
