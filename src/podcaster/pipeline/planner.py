"""Download planning: which episodes still need to be fetched.

Pure functions only. An episode counts as downloaded when either its
identifier is recorded in the download state or a non-empty file already
sits at its destination path, so losing one of the two never causes a
re-download.
"""

from collections.abc import Iterable, Set
from dataclasses import dataclass
from pathlib import Path

from podcaster.feeds.models import Episode


def episode_identifier(episode: Episode) -> str:
    """Key used to remember that an episode was downloaded.

    The feed guid when present, otherwise the media file name.
    """
    return episode.guid if episode.guid else episode.file_name


def destination_path(episode: Episode, destination_dir: Path) -> Path:
    return destination_dir / episode.file_name


def is_present_on_disk(episode: Episode, destination_dir: Path) -> bool:
    """True if a non-empty file exists at the episode's destination."""
    if not episode.file_name:
        return False
    path = destination_path(episode, destination_dir)
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def should_download(
    episode: Episode, already_downloaded: Set[str], destination_dir: Path
) -> bool:
    """Decide whether an episode needs downloading.

    Args:
        episode: Candidate episode
        already_downloaded: Identifiers recorded for this podcast
        destination_dir: Directory the podcast's files live in

    Returns:
        False if the episode is recorded or already on disk
    """
    if episode_identifier(episode) in already_downloaded:
        return False
    return not is_present_on_disk(episode, destination_dir)


@dataclass(frozen=True)
class PlannedEpisode:
    """An episode selected for this run with its download decision."""

    episode: Episode
    identifier: str
    needs_download: bool
    found_on_disk: bool  # on disk but not yet recorded
    conflict: str | None = None  # title of the earlier episode owning the same file name


def plan_episodes(
    episodes: Iterable[Episode],
    already_downloaded: Set[str],
    destination_dir: Path,
    max_count: int,
) -> list[PlannedEpisode]:
    """Select the first ``max_count`` episodes in feed order and plan each.

    Each destination path belongs to the first selected episode that maps
    to it. Later episodes with the same file name are planned as conflicts:
    never downloaded and never recorded.
    """
    plan = []
    claimed: dict[str, Episode] = {}
    for episode in list(episodes)[: max(max_count, 0)]:
        identifier = episode_identifier(episode)
        owner = claimed.get(episode.file_name)
        if owner is not None:
            plan.append(
                PlannedEpisode(
                    episode=episode,
                    identifier=identifier,
                    needs_download=False,
                    found_on_disk=False,
                    conflict=owner.title,
                )
            )
            continue
        if episode.file_name:
            claimed[episode.file_name] = episode

        needs_download = should_download(episode, already_downloaded, destination_dir)
        plan.append(
            PlannedEpisode(
                episode=episode,
                identifier=identifier,
                needs_download=needs_download,
                found_on_disk=not needs_download and identifier not in already_downloaded,
            )
        )
    return plan
