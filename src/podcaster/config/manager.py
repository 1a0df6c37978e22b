"""Settings manager for locating and loading the podcaster settings file."""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from podcaster.config.schema import AppSettings, PodcastConfig
from podcaster.utils.errors import (
    ConfigNotFoundError,
    InvalidConfigError,
    PodcastNotFoundError,
)
from podcaster.utils.paths import get_settings_candidates

logger = logging.getLogger(__name__)


class SettingsManager:
    """Loads and validates the settings file.

    The first existing file among ``~/.podcasts.json``, ``~/.podcasts.toml``
    and ``~/.podcasts.yaml`` is used unless an explicit path is given.
    """

    def __init__(self, settings_file: Path | None = None, home: Path | None = None) -> None:
        """Initialize the settings manager.

        Args:
            settings_file: Explicit settings file. Skips the lookup when set.
            home: Directory searched for the default settings files.
        """
        self.settings_file = settings_file
        self.candidates = [settings_file] if settings_file else get_settings_candidates(home)

    def find_settings_file(self) -> Path:
        """Return the settings file to load.

        Raises:
            ConfigNotFoundError: If none of the candidate files exists
        """
        for candidate in self.candidates:
            if candidate.is_file():
                return candidate

        searched = ", ".join(str(c) for c in self.candidates)
        raise ConfigNotFoundError(f"No settings file found (looked for {searched})")

    def load_settings(self) -> AppSettings:
        """Load and validate the settings file.

        Returns:
            Validated AppSettings instance

        Raises:
            ConfigNotFoundError: If the settings file doesn't exist
            InvalidConfigError: If the settings file is unparseable or invalid
        """
        path = self.find_settings_file()
        logger.info(f"Parsing the settings file {path}")

        try:
            data = self._read(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise InvalidConfigError(f"Cannot parse settings file {path}: {e}") from e

        try:
            return AppSettings.model_validate(data or {})
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid settings in {path}: {e}") from e

    def _read(self, path: Path) -> Any:
        suffix = path.suffix.lower()
        if suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f)
        if suffix in (".yaml", ".yml"):
            with open(path) as f:
                return yaml.safe_load(f)
        with open(path) as f:
            return json.load(f)


def select_podcasts(
    podcasts: list[PodcastConfig], podcast_id: str | None = None
) -> list[PodcastConfig]:
    """Filter configured podcasts by id.

    Args:
        podcasts: All configured podcasts
        podcast_id: Id to keep, or None to keep everything

    Raises:
        PodcastNotFoundError: If podcast_id is not configured
    """
    if podcast_id is None:
        return list(podcasts)

    selected = [p for p in podcasts if p.id == podcast_id]
    if not selected:
        raise PodcastNotFoundError(f"Podcast '{podcast_id}' not found in settings")
    return selected
