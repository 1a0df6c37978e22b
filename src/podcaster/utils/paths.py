"""Well-known file locations in the user's home directory."""

from pathlib import Path

SETTINGS_BASENAME = ".podcasts"
SETTINGS_SUFFIXES = (".json", ".toml", ".yaml")
STATE_FILENAME = ".podcaster_state.json"


def get_home_dir() -> Path:
    """Return the current user's home directory."""
    return Path.home()


def get_settings_candidates(home: Path | None = None) -> list[Path]:
    """Settings files in lookup order (first existing one wins)."""
    home = home or get_home_dir()
    return [home / f"{SETTINGS_BASENAME}{suffix}" for suffix in SETTINGS_SUFFIXES]


def get_state_file(home: Path | None = None) -> Path:
    """Path of the persisted download state."""
    return (home or get_home_dir()) / STATE_FILENAME
