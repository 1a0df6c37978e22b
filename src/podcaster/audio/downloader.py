"""Episode downloader using httpx."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

import aiofiles
import httpx

from podcaster.feeds.models import Episode
from podcaster.utils.errors import DownloadError

logger = logging.getLogger(__name__)

# Redirect hops followed per download; a longer chain is an error
MAX_REDIRECTS = 1
CHUNK_SIZE = 64 * 1024
ERROR_BODY_LIMIT = 500


class EpisodeDownloader:
    """Download episode media files.

    The file is always named after the episode's original media URL, even
    when the server redirects to a differently named location. Content is
    streamed to a hidden temporary file and renamed into place once
    complete, so the destination path never holds a truncated file.

    Example:
        >>> async with httpx.AsyncClient() as client:
        ...     downloader = EpisodeDownloader(client)
        ...     path = await downloader.download(episode, Path("~/podcasts/show"))
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            client: HTTP client shared across downloads
            semaphore: Optional limit on simultaneous transfers
        """
        self.client = client
        self.semaphore = semaphore

    async def download(self, episode: Episode, destination_dir: Path) -> Path:
        """Download one episode into destination_dir.

        Args:
            episode: Episode to download
            destination_dir: Existing directory to write into

        Returns:
            Path to the downloaded file

        Raises:
            DownloadError: If the transfer or the file write fails
        """
        file_name = episode.file_name
        if not file_name:
            raise DownloadError(f"Cannot derive a file name from {episode.media_url}")

        destination = destination_dir / file_name

        if self.semaphore is None:
            await self._download(episode.media_url, destination)
        else:
            async with self.semaphore:
                await self._download(episode.media_url, destination)

        return destination

    async def _download(self, url: str, destination: Path) -> None:
        response = await self._resolve(url)
        try:
            await self._write(response, destination)
        except httpx.HTTPError as e:
            raise DownloadError(f"Transfer from {response.url} failed: {e}") from e
        except OSError as e:
            raise DownloadError(f"Cannot write {destination}: {e}") from e
        finally:
            await response.aclose()

    async def _resolve(self, url: str) -> httpx.Response:
        """Issue the GET, following at most MAX_REDIRECTS redirect hops.

        Returns an open streaming response with a 2xx status.
        """
        target = httpx.URL(url)
        for hop in range(MAX_REDIRECTS + 1):
            request = self.client.build_request("GET", target)
            try:
                response = await self.client.send(request, stream=True, follow_redirects=False)
            except httpx.HTTPError as e:
                raise DownloadError(f"Request to {target} failed: {e}") from e

            if response.is_success:
                return response

            if response.is_redirect:
                await response.aclose()
                location = response.headers.get("location")
                if not location:
                    raise DownloadError(
                        f"Redirect from {target} has no Location header",
                        status_code=response.status_code,
                    )
                if hop == MAX_REDIRECTS:
                    raise DownloadError(
                        f"Too many redirects fetching {url}", status_code=response.status_code
                    )
                target = response.url.join(location)
                logger.debug(f"{url} is being redirected to {target}")
                continue

            body = await self._error_body(response)
            raise DownloadError(
                f"HTTP {response.status_code} from {target}: {body}",
                status_code=response.status_code,
                body=body,
            )

        raise DownloadError(f"Too many redirects fetching {url}")  # pragma: no cover

    async def _write(self, response: httpx.Response, destination: Path) -> None:
        # Unique per transfer, in the destination directory so the rename stays on one filesystem
        temp_fd, temp_name = tempfile.mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
        )
        os.close(temp_fd)
        temp_path = Path(temp_name)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    await f.write(chunk)

            await asyncio.to_thread(temp_path.replace, destination)
        finally:
            # Gone after a successful rename; removes partial data otherwise
            temp_path.unlink(missing_ok=True)

    async def _error_body(self, response: httpx.Response) -> str:
        try:
            await response.aread()
            text = response.text
        except httpx.HTTPError:
            text = ""
        finally:
            await response.aclose()
        return text[:ERROR_BODY_LIMIT]
