"""Per-podcast processing: fetch the feed, plan, download, collect outcomes."""

import asyncio
import logging
from collections.abc import Set
from dataclasses import dataclass
from pathlib import Path

import httpx

from podcaster.audio.downloader import EpisodeDownloader
from podcaster.config.schema import PodcastConfig
from podcaster.feeds.models import Episode
from podcaster.feeds.parser import RSSParser
from podcaster.pipeline.models import EpisodeFailure, RunResult
from podcaster.pipeline.planner import PlannedEpisode, plan_episodes
from podcaster.pipeline.reporter import Reporter
from podcaster.utils.errors import DownloadError, FeedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Outcome:
    planned: PlannedEpisode
    path: Path | None = None
    error: str | None = None


class PodcastOrchestrator:
    """Runs feed retrieval, planning and downloads for one podcast.

    A feed failure yields a RunResult with ``feed_error`` set; a failed
    episode is recorded in ``failed`` while its siblings carry on. Nothing
    raises out of :meth:`process_podcast` for either case.
    """

    def __init__(
        self,
        media_dir: Path,
        client: httpx.AsyncClient,
        parser: RSSParser | None = None,
        downloader: EpisodeDownloader | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            media_dir: Root directory; each podcast gets a subdirectory
            client: HTTP client used for the feed request
            parser: Feed fetcher/parser (default RSSParser())
            downloader: Episode downloader (default uses ``client``)
            reporter: Progress observer
        """
        self.media_dir = media_dir
        self.client = client
        self.parser = parser or RSSParser()
        self.downloader = downloader or EpisodeDownloader(client)
        self.reporter = reporter or Reporter()

    async def process_podcast(
        self, config: PodcastConfig, already_downloaded: Set[str], max_count: int
    ) -> RunResult:
        """Download up to ``max_count`` of the podcast's latest episodes.

        Args:
            config: Podcast to process
            already_downloaded: Identifiers recorded for this podcast
            max_count: Number of episodes, in feed order, to consider

        Returns:
            RunResult describing every selected episode
        """
        podcast_id = config.id
        podcast_dir = self.media_dir / podcast_id
        logger.info(f"Downloading latest episodes of {podcast_id}")
        self.reporter.podcast_started(podcast_id)

        try:
            podcast_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._feed_failed(podcast_id, f"Cannot create {podcast_dir}: {e}")

        try:
            episodes = await self.parser.fetch_episodes(self.client, config.url)
        except FeedError as e:
            return self._feed_failed(podcast_id, str(e))

        plan = plan_episodes(episodes, already_downloaded, podcast_dir, max_count)
        outcomes = await asyncio.gather(
            *(self._process_episode(podcast_id, item, podcast_dir) for item in plan)
        )

        result = self._fold(podcast_id, outcomes)
        self.reporter.podcast_finished(result)
        return result

    async def _process_episode(
        self, podcast_id: str, planned: PlannedEpisode, podcast_dir: Path
    ) -> _Outcome:
        episode = planned.episode
        if planned.conflict is not None:
            reason = f"File name {episode.file_name} is already used by \"{planned.conflict}\""
            logger.error(f"{podcast_id}: episode \"{episode.title}\" not downloaded: {reason}")
            self.reporter.episode_failed(podcast_id, episode, reason)
            return _Outcome(planned, error=reason)

        if not planned.needs_download:
            logger.info(f"{podcast_id}: episode \"{episode.title}\" already downloaded, skipping..")
            self.reporter.episode_skipped(podcast_id, episode)
            return _Outcome(planned)

        logger.info(
            f"{podcast_id}: downloading episode \"{episode.title}\" "
            f"published at {episode.published:%Y-%m-%d %H:%M} from {episode.media_url}"
        )
        self.reporter.episode_started(podcast_id, episode)
        try:
            path = await self.downloader.download(episode, podcast_dir)
        except DownloadError as e:
            logger.error(f"{podcast_id}: episode \"{episode.title}\" could not be downloaded: {e}")
            self.reporter.episode_failed(podcast_id, episode, str(e))
            return _Outcome(planned, error=str(e))

        self.reporter.episode_downloaded(podcast_id, episode, path)
        return _Outcome(planned, path=path)

    def _fold(self, podcast_id: str, outcomes: list[_Outcome]) -> RunResult:
        succeeded: list[Episode] = []
        skipped: list[Episode] = []
        failed: list[EpisodeFailure] = []
        identifiers: set[str] = set()
        files: list[Path] = []

        # Feed order is preserved: gather returns results positionally
        for outcome in outcomes:
            planned = outcome.planned
            if outcome.error is not None:
                failed.append(EpisodeFailure(planned.episode, outcome.error))
            elif outcome.path is not None:
                succeeded.append(planned.episode)
                identifiers.add(planned.identifier)
                files.append(outcome.path)
            else:
                skipped.append(planned.episode)
                if planned.found_on_disk:
                    identifiers.add(planned.identifier)

        return RunResult(
            podcast_id=podcast_id,
            succeeded=tuple(succeeded),
            skipped=tuple(skipped),
            failed=tuple(failed),
            new_identifiers=frozenset(identifiers),
            files=tuple(files),
        )

    def _feed_failed(self, podcast_id: str, reason: str) -> RunResult:
        logger.error(f"{podcast_id}: Got an error {reason} while fetching podcast feed")
        self.reporter.feed_failed(podcast_id, reason)
        result = RunResult.from_feed_error(podcast_id, reason)
        self.reporter.podcast_finished(result)
        return result
