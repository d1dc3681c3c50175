"""Download notifications.

Provides:
- NullNotifier: used when no notification target is configured
- DiscordNotifier: posts an embed to a named Discord channel via the REST API
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import aiohttp

from rssdd.feed.parser import FeedItem
from rssdd.utils.exceptions import NotificationError
from rssdd.utils.logging_config import get_logger

logger = get_logger(__name__)

# Discord rejects embed titles longer than this
_MAX_EMBED_TITLE = 256


class Notifier(Protocol):
    """Something that can announce a finished download."""

    async def notify(self, item: FeedItem) -> None:
        """Announce that ``item`` was downloaded."""


class NullNotifier:
    """Notifier that does nothing."""

    async def notify(self, item: FeedItem) -> None:
        """Ignore the notification."""
        logger.debug("No notifier configured; skipping %s", item.link)


class DiscordNotifier:
    """Sends download notifications to a Discord channel looked up by name."""

    def __init__(
        self,
        token: str,
        channel: str,
        session: aiohttp.ClientSession,
        api_base: str = "https://discord.com/api/v10",
    ):
        """Initialize notifier; the channel ID is resolved on first use."""
        self.token = token
        self.channel = channel
        self.session = session
        self.api_base = api_base.rstrip("/")
        self.channel_id: str | None = None

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self.token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.api_base}{path}"
        try:
            async with self.session.request(
                method, url, headers=self._headers, **kwargs
            ) as response:
                if response.status >= 400:
                    msg = f"Discord API {method} {path} failed with status {response.status}"
                    raise NotificationError(msg, {"status": response.status})
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            msg = f"Discord API {method} {path} failed: {e}"
            raise NotificationError(msg) from e

    async def resolve_channel_id(self) -> str:
        """Find the ID of the configured channel across the bot's guilds."""
        guilds = await self._request("GET", "/users/@me/guilds")
        for guild in guilds:
            channels = await self._request("GET", f"/guilds/{guild['id']}/channels")
            for channel in channels:
                if channel.get("name") == self.channel:
                    self.channel_id = str(channel["id"])

        if self.channel_id is None:
            msg = f"Discord channel {self.channel!r} not found"
            raise NotificationError(msg)
        logger.info("Resolved Discord channel %s to %s", self.channel, self.channel_id)
        return self.channel_id

    async def notify(self, item: FeedItem) -> None:
        """Post an embed describing the downloaded item."""
        channel_id = self.channel_id or await self.resolve_channel_id()
        payload = {
            "embeds": [
                {
                    "title": item.title[:_MAX_EMBED_TITLE],
                    "url": item.link,
                    "description": f"Downloaded '{item.title}' ({item.link})",
                }
            ]
        }
        await self._request("POST", f"/channels/{channel_id}/messages", json=payload)
