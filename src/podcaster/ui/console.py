"""Console rendering for podcaster commands."""

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from podcaster.feeds.models import Episode
from podcaster.pipeline.models import FeedListing, FleetReport, RunResult
from podcaster.pipeline.reporter import Reporter
from podcaster.utils.display import format_size, truncate_text

TITLE_WIDTH = 70


class ConsoleReporter(Reporter):
    """Prints pipeline events as they happen."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def feed_failed(self, podcast_id: str, reason: str) -> None:
        self.console.print(
            f"[red]✗[/red] [bold]{escape(podcast_id)}[/bold]: feed failed: {escape(reason)}"
        )

    def episode_started(self, podcast_id: str, episode: Episode) -> None:
        self.console.print(
            f"[cyan]→[/cyan] {escape(podcast_id)}: downloading "
            f"\"{escape(episode.title)}\" [dim]({episode.published:%Y-%m-%d})[/dim]"
        )

    def episode_skipped(self, podcast_id: str, episode: Episode) -> None:
        self.console.print(
            f"[dim]  {escape(podcast_id)}: \"{escape(episode.title)}\" "
            "already downloaded, skipping[/dim]"
        )

    def episode_downloaded(self, podcast_id: str, episode: Episode, path: Path) -> None:
        try:
            size = f" ({format_size(path.stat().st_size)})"
        except OSError:
            size = ""
        self.console.print(
            f"[green]✓[/green] {escape(podcast_id)}: \"{escape(episode.title)}\" "
            f"→ {escape(str(path))}{size}"
        )

    def episode_failed(self, podcast_id: str, episode: Episode, reason: str) -> None:
        self.console.print(
            f"[red]✗[/red] {escape(podcast_id)}: \"{escape(episode.title)}\" "
            f"could not be downloaded: {escape(reason)}"
        )

    def state_failed(self, path: Path, reason: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] Download state not saved: {escape(reason)}")


def render_result(console: Console, result: RunResult) -> None:
    """Per-podcast summary line printed after a download run."""
    podcast_id = escape(result.podcast_id)
    if result.feed_error is not None:
        console.print(f"[red]{podcast_id}[/red]: no episodes processed")
    elif result.files:
        names = ", ".join(escape(path.name) for path in result.files)
        console.print(f"[green]{podcast_id}[/green]: Check the files {names}")
    else:
        console.print(f"{podcast_id}: No files downloaded")

    if result.failed:
        console.print(f"[dim]  {len(result.failed)} episode(s) failed[/dim]")


def render_report(console: Console, report: FleetReport) -> None:
    """Summary printed at the end of ``download``."""
    console.print()
    for result in report.results:
        render_result(console, result)

    console.print(
        f"\n[dim]Downloaded {report.downloaded_count} episode(s), "
        f"{report.failed_count} failed[/dim]"
    )


def render_listing(console: Console, listing: FeedListing) -> None:
    """Numbered episode list for one podcast, as printed by ``show``."""
    console.print(f"[magenta underline]{escape(listing.podcast_id)}[/magenta underline]:")

    if listing.feed_error is not None:
        console.print(f"  [red]✗[/red] {escape(listing.feed_error)}")
        return

    if not listing.episodes:
        console.print("  [dim]No episodes found[/dim]")
        return

    for index, episode in enumerate(listing.episodes, 1):
        title = truncate_text(episode.title, TITLE_WIDTH)
        console.print(
            f"{index:2d}. {escape(f'{title:<{TITLE_WIDTH}}')} "
            f"[yellow]({episode.published:%Y-%m-%d %H:%M})[/yellow]",
            highlight=False,
        )


def listings_to_json(listings: list[FeedListing]) -> str:
    """JSON document emitted by ``show --json``."""
    podcasts = []
    for listing in listings:
        podcasts.append(
            {
                "id": listing.podcast_id,
                "episodes": [
                    {
                        "title": episode.title,
                        "url": episode.media_url,
                        "guid": episode.guid,
                        "published": episode.published.isoformat(),
                    }
                    for episode in listing.episodes
                ],
                "error": listing.feed_error,
            }
        )
    return json.dumps({"podcasts": podcasts, "total": len(podcasts)}, indent=2)
