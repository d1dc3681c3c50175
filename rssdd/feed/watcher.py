"""Periodic feed polling.

For each configured feed the watcher repeatedly:
- fetches and parses the feed
- skips items already present in the download history
- skips items whose title matches none of the feed's patterns
- downloads the item into the feed's folder and records it
- sends a notification
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
import aiohttp

from rssdd.core.metainfo import summarize
from rssdd.feed.downloader import Downloader, filename_for
from rssdd.feed.matcher import TitleMatcher
from rssdd.feed.parser import FeedItem, parse_feed
from rssdd.utils.exceptions import (
    DownloadError,
    FeedError,
    NotificationError,
    StorageError,
    TorrentError,
)
from rssdd.utils.logging_config import LoggingContext, get_logger, log_exception

if TYPE_CHECKING:
    from rssdd.feed.history import DownloadHistory
    from rssdd.feed.notifier import Notifier
    from rssdd.models import Config, FeedConfig

logger = get_logger(__name__)


class FeedWatcher:
    """Polls every configured feed on its own interval."""

    def __init__(
        self,
        config: Config,
        history: DownloadHistory,
        notifier: Notifier,
        session: aiohttp.ClientSession,
        downloader: Downloader | None = None,
    ):
        """Initialize watcher.

        Args:
            config: Loaded configuration
            history: Opened download history
            notifier: Notification target
            session: Shared HTTP session for feeds and downloads
            downloader: Optional downloader; defaults to one using ``session``

        """
        self.config = config
        self.history = history
        self.notifier = notifier
        self.session = session
        self.downloader = downloader or Downloader(session)
        self._tasks: list[asyncio.Task] = []

    async def fetch(self, feed: FeedConfig) -> list[FeedItem]:
        """Fetch and parse one feed."""
        try:
            async with self.session.get(feed.url) as response:
                if response.status >= 400:
                    msg = f"Fetching {feed.url} failed with status {response.status}"
                    raise FeedError(msg, {"status": response.status})
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            msg = f"Failed to fetch feed {feed.url}: {e}"
            raise FeedError(msg) from e
        return parse_feed(content)

    async def poll_once(self, feed: FeedConfig) -> list[FeedItem]:
        """Run one fetch/match/download pass and return the downloaded items."""
        items = await self.fetch(feed)
        matcher = TitleMatcher(feed.compiled_patterns())
        downloaded: list[FeedItem] = []

        for item in items:
            try:
                if self.history.contains(item.link):
                    continue
                if not matcher.matches(item.title):
                    continue

                logger.info(
                    "Downloading '%s' to '%s'",
                    item.link,
                    Path(feed.folder) / filename_for(item.link),
                )
                path = await self.downloader.download(item.link, feed.folder, feed.cookie)
            except (DownloadError, StorageError) as e:
                log_exception(logger, e, f"Error processing {item.link}")
                continue

            try:
                self.history.add(item)
            except StorageError as e:
                # The file is kept; the next poll will fetch it again
                log_exception(
                    logger,
                    e,
                    f"Downloaded {item.link} to {path} but could not record it",
                )

            await self._describe_download(path)

            try:
                await self.notifier.notify(item)
            except NotificationError as e:
                logger.warning("Error sending notification for %s: %s", item.link, e)

            downloaded.append(item)

        return downloaded

    async def _describe_download(self, path: Path) -> None:
        """Log the metainfo of a downloaded .torrent file."""
        if path.suffix.lower() != ".torrent":
            return

        limit = self.config.codec.max_input_bytes
        try:
            size = path.stat().st_size
            if size > limit:
                logger.warning("Skipping metainfo check of %s: %d bytes exceeds %d", path, size, limit)
                return
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
            summary = summarize(data, max_depth=self.config.codec.max_depth)
        except (OSError, TorrentError) as e:
            logger.warning("Downloaded file %s is not valid metainfo: %s", path, e)
            return

        logger.info(
            "Metainfo '%s': %d file(s), %d bytes, info hash %s",
            summary.name,
            summary.file_count,
            summary.total_length,
            summary.info_hash_hex,
        )

    async def run_feed(self, feed: FeedConfig) -> None:
        """Poll ``feed`` forever, sleeping ``feed.interval`` seconds between polls."""
        while True:
            try:
                with LoggingContext("poll", logger=logger, feed_url=feed.url):
                    await self.poll_once(feed)
            except FeedError as e:
                logger.warning("%s; retrying in %ds", e, feed.interval)
            await asyncio.sleep(feed.interval)

    async def run(self) -> None:
        """Poll all configured feeds until cancelled."""
        if not self.config.feeds:
            logger.warning("No feeds configured")
            return

        self._tasks = [
            asyncio.create_task(self.run_feed(feed), name=f"feed:{feed.url}")
            for feed in self.config.feeds
        ]
        logger.info("Watching %d feed(s)", len(self._tasks))
        try:
            await asyncio.gather(*self._tasks)
        finally:
            self.stop()

    def stop(self) -> None:
        """Cancel all feed tasks."""
        for task in self._tasks:
            task.cancel()
        self._tasks = []
