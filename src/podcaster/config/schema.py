"""Settings schema models using Pydantic."""

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_DOWNLOAD_COUNT = 3
DEFAULT_SHOW_COUNT = 10
DEFAULT_MAX_CONCURRENT = 4


class PodcastConfig(BaseModel):
    """A single configured podcast feed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    url: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("podcast id must not be empty")
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"podcast id '{value}' cannot be used as a directory name")
        return value

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"'{value}' is not an absolute http(s) URL")
        return value.strip()


class MediaConfig(BaseModel):
    """The [config] section of the settings file."""

    media_dir: Path = Field(..., validation_alias=AliasChoices("mediaDir", "media_dir"))
    count: int = Field(default=DEFAULT_DOWNLOAD_COUNT, ge=1)
    max_concurrent: int = Field(
        default=DEFAULT_MAX_CONCURRENT,
        ge=1,
        validation_alias=AliasChoices("maxConcurrent", "max_concurrent"),
    )

    @field_validator("media_dir")
    @classmethod
    def expand_media_dir(cls, value: Path) -> Path:
        return value.expanduser()


class AppSettings(BaseModel):
    """Complete settings file."""

    config: MediaConfig
    podcasts: list[PodcastConfig] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def podcasts_from_table(cls, data: Any) -> Any:
        # TOML settings may list podcasts as a table of id = "url"
        if isinstance(data, dict) and isinstance(data.get("podcasts"), dict):
            data = dict(data)
            data["podcasts"] = [
                {"id": podcast_id, "url": url} for podcast_id, url in data["podcasts"].items()
            ]
        return data

    @model_validator(mode="after")
    def check_unique_ids(self) -> "AppSettings":
        seen: set[str] = set()
        for podcast in self.podcasts:
            if podcast.id in seen:
                raise ValueError(f"duplicate podcast id '{podcast.id}'")
            seen.add(podcast.id)
        return self

    @property
    def media_dir(self) -> Path:
        return self.config.media_dir
