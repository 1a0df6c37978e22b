"""CLI entry point for podcaster."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from podcaster.config.logging import setup_logging
from podcaster.config.manager import SettingsManager, select_podcasts
from podcaster.config.schema import DEFAULT_SHOW_COUNT
from podcaster.pipeline.runner import SHOW_TIMEOUT_SECONDS, FleetRunner
from podcaster.state.store import StateStore
from podcaster.ui.console import (
    ConsoleReporter,
    listings_to_json,
    render_listing,
    render_report,
)
from podcaster.utils.errors import ConfigError, NotFoundError, PodcasterError

app = typer.Typer(
    name="podcaster",
    help="Download the latest episodes of your podcasts",
    no_args_is_help=True,
)
console = Console()

PodcastOption = Annotated[
    str | None,
    typer.Option("--podcast", "-p", help="Podcast ID, which identifies the podcast"),
]
SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", help="Settings file (default: ~/.podcasts.json/.toml/.yaml)"),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", help="Seconds before unfinished podcasts are abandoned", min=1),
]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """podcaster - fetch the latest episodes of your podcasts."""
    # Initialize logging before any command runs
    setup_logging(verbose=verbose, log_file=log_file)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podcaster import __version__

    console.print(f"[bold cyan]podcaster[/bold cyan] v{__version__}")


@app.command("download")
def download_command(
    podcast: PodcastOption = None,
    count: Annotated[
        int | None,
        typer.Option(
            "--count", "-c", help="Count of latest podcast episodes to download", min=1
        ),
    ] = None,
    settings_file: SettingsOption = None,
    state_file: Annotated[
        Path | None,
        typer.Option("--state", help="Download state file (default: ~/.podcaster_state.json)"),
    ] = None,
    timeout: TimeoutOption = None,
) -> None:
    """Download the latest episodes of every configured podcast.

    Episodes already recorded in the download state, or already present in
    the media directory, are skipped.

    Examples:
        podcaster download

        podcaster download --podcast my-show --count 5
    """
    try:
        settings = SettingsManager(settings_file).load_settings()
        podcasts = select_podcasts(settings.podcasts, podcast)
    except (ConfigError, NotFoundError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    max_count = count or settings.config.count
    # Allow a minute per requested episode unless told otherwise
    run_timeout = timeout or max_count * 60.0

    runner = FleetRunner(
        media_dir=settings.media_dir,
        state_store=StateStore(state_file),
        reporter=ConsoleReporter(console),
        max_concurrent=settings.config.max_concurrent,
    )

    try:
        report = asyncio.run(runner.run(podcasts, max_count, timeout=run_timeout))
    except PodcasterError as e:
        console.print(f"[red]✗[/red] Error: {escape(str(e))}")
        sys.exit(1)

    render_report(console, report)


@app.command("show")
def show_command(
    podcast: PodcastOption = None,
    count: Annotated[
        int,
        typer.Option("--count", "-c", help="Count of latest podcast episodes to show", min=1),
    ] = DEFAULT_SHOW_COUNT,
    settings_file: SettingsOption = None,
    timeout: TimeoutOption = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List the latest episodes of every configured podcast.

    Examples:
        podcaster show

        podcaster show --podcast my-show --count 20
    """
    try:
        settings = SettingsManager(settings_file).load_settings()
        podcasts = select_podcasts(settings.podcasts, podcast)
    except (ConfigError, NotFoundError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}, indent=2))
        else:
            console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    runner = FleetRunner(media_dir=settings.media_dir)
    listings = asyncio.run(
        runner.show(podcasts, count, timeout=timeout or SHOW_TIMEOUT_SECONDS)
    )

    if json_output:
        print(listings_to_json(listings))
        return

    for listing in listings:
        render_listing(console, listing)


if __name__ == "__main__":
    app()
