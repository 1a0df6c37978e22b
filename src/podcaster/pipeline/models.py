"""Result types produced by the download pipeline."""

from dataclasses import dataclass, field
from pathlib import Path

from podcaster.feeds.models import Episode


@dataclass(frozen=True)
class EpisodeFailure:
    """An episode whose download failed, with the reason."""

    episode: Episode
    reason: str


@dataclass(frozen=True)
class RunResult:
    """Outcome of processing one podcast.

    Attributes:
        podcast_id: Configured podcast id
        succeeded: Episodes downloaded during this run
        skipped: Episodes that needed no download
        failed: Episodes whose download failed
        feed_error: Set when the feed (or media directory) was unusable
        new_identifiers: Identifiers to merge into the download state
        files: Paths written during this run
    """

    podcast_id: str
    succeeded: tuple[Episode, ...] = ()
    skipped: tuple[Episode, ...] = ()
    failed: tuple[EpisodeFailure, ...] = ()
    feed_error: str | None = None
    new_identifiers: frozenset[str] = frozenset()
    files: tuple[Path, ...] = ()

    @property
    def ok(self) -> bool:
        return self.feed_error is None and not self.failed

    @classmethod
    def from_feed_error(cls, podcast_id: str, reason: str) -> "RunResult":
        return cls(podcast_id=podcast_id, feed_error=reason)


@dataclass(frozen=True)
class FeedListing:
    """Episodes listed by ``show`` for one podcast."""

    podcast_id: str
    episodes: tuple[Episode, ...] = ()
    feed_error: str | None = None


@dataclass
class FleetReport:
    """Aggregated outcome of a ``download`` run."""

    results: list[RunResult] = field(default_factory=list)
    state_path: Path | None = None
    state_error: str | None = None

    @property
    def downloaded_count(self) -> int:
        return sum(len(r.succeeded) for r in self.results)

    @property
    def failed_count(self) -> int:
        return sum(len(r.failed) for r in self.results)
