"""Download matched feed items to disk."""

from __future__ import annotations

import asyncio
import hashlib
import posixpath
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiofiles
import aiohttp

from rssdd.utils.exceptions import DownloadError
from rssdd.utils.logging_config import get_logger

logger = get_logger(__name__)


def filename_for(link: str) -> str:
    """Return the local file name for ``link``.

    Uses the last segment of the URL path, falling back to a hash of the
    link when the path has no usable name.
    """
    name = posixpath.basename(unquote(urlparse(link).path))
    if name in {"", ".", ".."}:
        return hashlib.sha1(link.encode("utf-8")).hexdigest()  # nosec B324 - file naming only
    return name


class Downloader:
    """Streams HTTP resources into a folder."""

    def __init__(self, session: aiohttp.ClientSession, chunk_size: int = 64 * 1024):
        """Initialize downloader.

        Args:
            session: Shared HTTP session
            chunk_size: Bytes read from the response per write

        """
        self.session = session
        self.chunk_size = chunk_size

    async def download(
        self,
        link: str,
        folder: str | Path,
        cookie: str | None = None,
    ) -> Path:
        """Download ``link`` into ``folder`` and return the written path.

        The body is written to a ``.part`` file that is renamed once
        complete, so a failed download never leaves a truncated file
        under the final name.

        Raises:
            DownloadError: On HTTP error status, transport or disk failure

        """
        dest_dir = Path(folder).expanduser()
        target = dest_dir / filename_for(link)
        part = target.with_name(target.name + ".part")
        headers = {"Cookie": cookie} if cookie else {}

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            async with self.session.get(link, headers=headers) as response:
                if response.status >= 400:
                    msg = f"Download of {link} failed with status {response.status}"
                    raise DownloadError(msg, {"status": response.status})
                async with aiofiles.open(part, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        await f.write(chunk)
            part.replace(target)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            part.unlink(missing_ok=True)
            msg = f"Failed to download {link}: {e}"
            raise DownloadError(msg) from e

        logger.debug("Wrote %s", target)
        return target
