"""Persistent record of downloaded episodes.

The state file is a JSON object mapping podcast id to the identifiers of
its downloaded episodes. A missing or corrupt file reads as empty state so
it never blocks downloading; writes go through a temp file and a rename so
readers never see half a file.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path

from podcaster.utils.errors import StateError
from podcaster.utils.paths import get_state_file

logger = logging.getLogger(__name__)

DownloadRecord = dict[str, set[str]]


def merge_records(
    base: Mapping[str, Iterable[str]], updates: Mapping[str, Iterable[str]]
) -> DownloadRecord:
    """Union two records per podcast id without mutating either."""
    merged: DownloadRecord = {podcast_id: set(ids) for podcast_id, ids in base.items()}
    for podcast_id, ids in updates.items():
        merged.setdefault(podcast_id, set()).update(ids)
    return merged


class StateStore:
    """Loads and saves the download record.

    Example:
        >>> store = StateStore(tmp_path / "state.json")
        >>> store.save({"show": {"guid-1"}})
        >>> store.load()
        {'show': {'guid-1'}}
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: State file (defaults to ~/.podcaster_state.json)
        """
        self.path = path or get_state_file()

    def load(self) -> DownloadRecord:
        """Read the download record, returning an empty one on any problem."""
        logger.info(f"Getting the state from {self.path}")
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self.path}: expected a JSON object")
            return {}

        record: DownloadRecord = {}
        for podcast_id, ids in data.items():
            if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
                # Only this podcast's history is lost; the others stay recorded
                logger.warning(
                    f"Ignoring entry '{podcast_id}' in state file {self.path}: "
                    "not a list of strings"
                )
                continue
            record[podcast_id] = set(ids)
        return record

    def save(self, record: Mapping[str, Iterable[str]]) -> None:
        """Atomically replace the state file with ``record``.

        Raises:
            StateError: If the file cannot be written
        """
        logger.info(f"Storing the state in {self.path}")
        data = {podcast_id: sorted(ids) for podcast_id, ids in sorted(record.items())}
        content = json.dumps(data, indent=4, sort_keys=True) + "\n"

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_file_atomic(content)
        except OSError as e:
            raise StateError(f"Failed to store state in {self.path}: {e}") from e

    def _write_file_atomic(self, content: str) -> None:
        # Temp file in the same directory keeps the rename on one filesystem
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=".tmp_", suffix=".json"
        )

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            Path(temp_path).replace(self.path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise
