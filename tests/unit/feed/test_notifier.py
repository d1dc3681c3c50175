"""Tests for download notifiers."""

from __future__ import annotations

import aiohttp
import pytest
from feed_fakes import FakeResponse, FakeSession

from rssdd.feed.notifier import DiscordNotifier, NullNotifier
from rssdd.feed.parser import FeedItem
from rssdd.utils.exceptions import NotificationError

pytestmark = [pytest.mark.unit, pytest.mark.feed]

API = "https://discord.test/api"
ITEM = FeedItem(title="Show S01E01", link="https://example.com/1.torrent")


def _discord_session(extra=None) -> FakeSession:
    responses = {
        ("GET", f"{API}/users/@me/guilds"): FakeResponse(json_data=[{"id": "1"}, {"id": "2"}]),
        ("GET", f"{API}/guilds/1/channels"): FakeResponse(
            json_data=[{"id": "10", "name": "general"}]
        ),
        ("GET", f"{API}/guilds/2/channels"): FakeResponse(
            json_data=[{"id": 20, "name": "downloads"}]
        ),
        ("POST", f"{API}/channels/20/messages"): FakeResponse(json_data={"id": "99"}),
    }
    responses.update(extra or {})
    return FakeSession(responses)


class TestNullNotifier:
    @pytest.mark.asyncio
    async def test_notify_does_nothing(self):
        await NullNotifier().notify(ITEM)


class TestDiscordNotifier:
    """Test DiscordNotifier against a fake REST API."""

    @pytest.mark.asyncio
    async def test_resolve_channel_id(self):
        session = _discord_session()
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API + "/")
        assert await notifier.resolve_channel_id() == "20"
        assert notifier.channel_id == "20"
        _, _, kwargs = session.requests[0]
        assert kwargs["headers"] == {"Authorization": "Bot tok"}

    @pytest.mark.asyncio
    async def test_unknown_channel(self):
        notifier = DiscordNotifier("tok", "missing", _discord_session(), api_base=API)
        with pytest.raises(NotificationError, match="not found"):
            await notifier.resolve_channel_id()

    @pytest.mark.asyncio
    async def test_notify_posts_embed(self):
        session = _discord_session()
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API)
        await notifier.notify(ITEM)

        method, url, kwargs = session.requests[-1]
        assert (method, url) == ("POST", f"{API}/channels/20/messages")
        embed = kwargs["json"]["embeds"][0]
        assert embed["title"] == ITEM.title
        assert embed["url"] == ITEM.link
        assert embed["description"] == f"Downloaded '{ITEM.title}' ({ITEM.link})"

    @pytest.mark.asyncio
    async def test_notify_reuses_resolved_channel(self):
        session = _discord_session()
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API)
        await notifier.resolve_channel_id()
        count = len(session.requests)
        await notifier.notify(ITEM)
        assert len(session.requests) == count + 1

    @pytest.mark.asyncio
    async def test_long_title_truncated(self):
        session = _discord_session()
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API)
        await notifier.notify(FeedItem(title="x" * 300, link="l"))
        assert len(session.requests[-1][2]["json"]["embeds"][0]["title"]) == 256

    @pytest.mark.asyncio
    async def test_error_status(self):
        session = _discord_session(
            {("POST", f"{API}/channels/20/messages"): FakeResponse(status=403)}
        )
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API)
        with pytest.raises(NotificationError) as exc_info:
            await notifier.notify(ITEM)
        assert exc_info.value.details["status"] == 403

    @pytest.mark.asyncio
    async def test_transport_error(self):
        session = _discord_session(
            {("GET", f"{API}/users/@me/guilds"): aiohttp.ClientConnectionError("down")}
        )
        notifier = DiscordNotifier("tok", "downloads", session, api_base=API)
        with pytest.raises(NotificationError):
            await notifier.resolve_channel_id()
