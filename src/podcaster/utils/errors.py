"""Custom exceptions for podcaster."""


class PodcasterError(Exception):
    """Base exception for all podcaster errors."""

    pass


class ConfigError(PodcasterError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""

    pass


class NotFoundError(PodcasterError):
    """A requested resource does not exist."""

    pass


class PodcastNotFoundError(NotFoundError):
    """Podcast id not present in the settings file."""

    pass


class FeedError(PodcasterError):
    """Feed retrieval and parsing errors."""

    pass


class FeedFetchError(FeedError):
    """Feed could not be retrieved."""

    pass


class FeedParseError(FeedError):
    """RSS feed parsing errors."""

    pass


class DownloadError(PodcasterError):
    """A single episode could not be downloaded.

    Attributes:
        status_code: HTTP status of the failing response, if any
        body: Response body (truncated) of the failing response, if any
    """

    def __init__(
        self, message: str, status_code: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StateError(PodcasterError):
    """Download state could not be written."""

    pass
