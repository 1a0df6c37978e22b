"""Retry utilities for network calls.

Implements exponential backoff with jitter for transient failures such as
timeouts, dropped connections and 5xx responses from feed servers.
"""

import logging

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)


# Error classification: Which errors should trigger retries?

class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class RateLimitError(RetryableError):
    """Server rate limit exceeded."""

    pass


class TimeoutError(RetryableError):
    """Request timeout."""

    pass


class ConnectionError(RetryableError):
    """Network connection error."""

    pass


class ServerError(RetryableError):
    """Server-side error (5xx)."""

    pass


class NonRetryableError(Exception):
    """Base class for errors that should NOT trigger retries."""

    pass


class InvalidRequestError(NonRetryableError):
    """Client error (4xx)."""

    pass


# Retry configuration

class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 10,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=10,
    min_wait_seconds=1,
    jitter=True,
)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.01,
    min_wait_seconds=0.001,
    jitter=False,
)

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    RateLimitError,
    TimeoutError,
    ConnectionError,
    ServerError,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        attempt_number = retry_state.attempt_number

        logger.warning(
            f"Retry attempt {attempt_number} failed: {type(exception).__name__}: {exception}"
        )


def async_retrying(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> AsyncRetrying:
    """Build an async retry controller with exponential backoff.

    Usage:
        async for attempt in async_retrying():
            with attempt:
                await fetch()

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types to retry on (all RetryableError subclasses if None)

    Returns:
        A tenacity AsyncRetrying instance that re-raises the last error
    """
    config = config or DEFAULT_RETRY_CONFIG
    retry_on = retry_on or RETRYABLE_ERRORS

    return AsyncRetrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential_jitter(
            initial=config.min_wait_seconds,
            max=config.max_wait_seconds,
            jitter=config.max_wait_seconds if config.jitter else 0,
        ),
        retry=retry_if_exception_type(retry_on),
        before_sleep=log_retry_attempt,
        reraise=True,
    )


def classify_http_error(status_code: int, error_message: str = "") -> Exception:
    """Classify HTTP error into retryable or non-retryable.

    Args:
        status_code: HTTP status code
        error_message: Short description of the failing request

    Returns:
        Appropriate exception instance
    """
    # 429 - Rate limit
    if status_code == 429:
        return RateLimitError(f"Rate limit exceeded: {error_message}")

    # 5xx - Server errors (retryable)
    if 500 <= status_code < 600:
        return ServerError(f"Server error (HTTP {status_code}): {error_message}")

    # 408 - Request timeout
    if status_code == 408:
        return TimeoutError(f"Request timeout: {error_message}")

    if 400 <= status_code < 500:
        return InvalidRequestError(f"Invalid request (HTTP {status_code}): {error_message}")

    return NonRetryableError(f"HTTP error {status_code}: {error_message}")
