"""Observer interface for pipeline progress.

The orchestrator and fleet runner report what happens through a Reporter
passed in by the caller. The base class ignores every event, so callers
override only what they want to display.
"""

from pathlib import Path

from podcaster.feeds.models import Episode
from podcaster.pipeline.models import RunResult


class Reporter:
    """No-op reporter; subclass and override the events you care about."""

    def podcast_started(self, podcast_id: str) -> None:
        pass

    def feed_failed(self, podcast_id: str, reason: str) -> None:
        pass

    def episode_skipped(self, podcast_id: str, episode: Episode) -> None:
        pass

    def episode_started(self, podcast_id: str, episode: Episode) -> None:
        pass

    def episode_downloaded(self, podcast_id: str, episode: Episode, path: Path) -> None:
        pass

    def episode_failed(self, podcast_id: str, episode: Episode, reason: str) -> None:
        pass

    def podcast_finished(self, result: RunResult) -> None:
        pass

    def state_saved(self, path: Path) -> None:
        pass

    def state_failed(self, path: Path, reason: str) -> None:
        pass
