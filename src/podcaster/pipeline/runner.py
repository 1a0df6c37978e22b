"""Fleet runner: process every configured podcast concurrently."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import httpx

from podcaster import __version__
from podcaster.audio.downloader import EpisodeDownloader
from podcaster.config.schema import DEFAULT_MAX_CONCURRENT, PodcastConfig
from podcaster.feeds.parser import RSSParser
from podcaster.pipeline.models import FeedListing, FleetReport, RunResult
from podcaster.pipeline.orchestrator import PodcastOrchestrator
from podcaster.pipeline.reporter import Reporter
from podcaster.state.store import StateStore, merge_records
from podcaster.utils.errors import FeedError, StateError

logger = logging.getLogger(__name__)

USER_AGENT = f"podcaster/{__version__}"
REQUEST_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
SHOW_TIMEOUT_SECONDS = 60.0

T = TypeVar("T")


def create_client() -> httpx.AsyncClient:
    """HTTP client shared by all feed and episode requests of one run."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        timeout=REQUEST_TIMEOUT,
    )


class FleetRunner:
    """Runs the podcast orchestrator for every configured podcast.

    Per-podcast tasks return immutable RunResults; the download state is
    merged and saved once, after every task has finished.

    Example:
        >>> runner = FleetRunner(media_dir=Path("~/podcasts").expanduser())
        >>> report = asyncio.run(runner.run(settings.podcasts, max_count=3))
    """

    def __init__(
        self,
        media_dir: Path,
        state_store: StateStore | None = None,
        reporter: Reporter | None = None,
        parser: RSSParser | None = None,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        client_factory: Callable[[], httpx.AsyncClient] = create_client,
    ) -> None:
        """Initialize the fleet runner.

        Args:
            media_dir: Root media directory
            state_store: Download state (default: ~/.podcaster_state.json)
            reporter: Progress observer
            parser: Feed fetcher/parser
            max_concurrent: Simultaneous episode transfers across all podcasts
            client_factory: Builds the HTTP client for a run
        """
        self.media_dir = media_dir
        self.state_store = state_store or StateStore()
        self.reporter = reporter or Reporter()
        self.parser = parser or RSSParser()
        self.max_concurrent = max_concurrent
        self.client_factory = client_factory

    async def run(
        self,
        podcasts: list[PodcastConfig],
        max_count: int,
        timeout: float | None = None,
    ) -> FleetReport:
        """Download the latest episodes of every podcast and record them.

        Args:
            podcasts: Podcasts to process
            max_count: Episodes per podcast to consider, in feed order
            timeout: Seconds before unfinished podcasts are abandoned

        Returns:
            FleetReport with one RunResult per podcast, in input order
        """
        record = self.state_store.load()
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async with self.client_factory() as client:
            orchestrator = PodcastOrchestrator(
                media_dir=self.media_dir,
                client=client,
                parser=self.parser,
                downloader=EpisodeDownloader(client, semaphore=semaphore),
                reporter=self.reporter,
            )
            results = await self._gather(
                [
                    orchestrator.process_podcast(
                        podcast, frozenset(record.get(podcast.id, ())), max_count
                    )
                    for podcast in podcasts
                ],
                timeout,
                on_timeout=lambda i, reason: self._timed_out(podcasts[i].id, reason),
            )

        # Single merge point: every task has joined
        updates = {r.podcast_id: r.new_identifiers for r in results if r.new_identifiers}
        report = FleetReport(results=results, state_path=self.state_store.path)

        try:
            self.state_store.save(merge_records(record, updates))
        except StateError as e:
            logger.warning(str(e))
            report.state_error = str(e)
            self.reporter.state_failed(self.state_store.path, str(e))
        else:
            logger.info("App state updated")
            self.reporter.state_saved(self.state_store.path)

        return report

    async def show(
        self,
        podcasts: list[PodcastConfig],
        count: int,
        timeout: float | None = SHOW_TIMEOUT_SECONDS,
    ) -> list[FeedListing]:
        """Fetch every feed and list its first ``count`` episodes.

        Never downloads episodes and never touches the download state.
        """
        async with self.client_factory() as client:

            async def list_feed(podcast: PodcastConfig) -> FeedListing:
                logger.info(f"Showing latest episodes of {podcast.id}")
                try:
                    episodes = await self.parser.fetch_episodes(client, podcast.url)
                except FeedError as e:
                    logger.error(f"{podcast.id}: Got an error {e} while fetching podcast feed")
                    return FeedListing(podcast_id=podcast.id, feed_error=str(e))
                return FeedListing(podcast_id=podcast.id, episodes=tuple(episodes[:count]))

            return await self._gather(
                [list_feed(podcast) for podcast in podcasts],
                timeout,
                on_timeout=lambda i, reason: FeedListing(
                    podcast_id=podcasts[i].id, feed_error=reason
                ),
            )

    async def _gather(
        self,
        coroutines: list[Awaitable[T]],
        timeout: float | None,
        on_timeout: Callable[[int, str], T],
    ) -> list[T]:
        """Run coroutines concurrently; results keep input order.

        Tasks still running when ``timeout`` expires are cancelled and
        replaced by ``on_timeout(index, reason)``.
        """
        if not coroutines:
            return []

        tasks = [asyncio.ensure_future(c) for c in coroutines]
        done, pending = await asyncio.wait(tasks, timeout=timeout)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        results: list[T] = []
        for index, task in enumerate(tasks):
            if task in done:
                results.append(task.result())
            else:
                results.append(on_timeout(index, f"timed out after {timeout:g} s"))
        return results

    def _timed_out(self, podcast_id: str, reason: str) -> RunResult:
        logger.error(f"{podcast_id}: {reason}, abandoning remaining downloads")
        self.reporter.feed_failed(podcast_id, reason)
        result = RunResult.from_feed_error(podcast_id, reason)
        self.reporter.podcast_finished(result)
        return result
