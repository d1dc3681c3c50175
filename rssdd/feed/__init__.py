"""Feed watching: fetch, match, download, record and notify."""

from __future__ import annotations

from rssdd.feed.downloader import Downloader, filename_for
from rssdd.feed.history import DownloadHistory, HistoryEntry
from rssdd.feed.matcher import TitleMatcher
from rssdd.feed.notifier import DiscordNotifier, Notifier, NullNotifier
from rssdd.feed.parser import FeedItem, parse_feed
from rssdd.feed.watcher import FeedWatcher

__all__ = [
    "DiscordNotifier",
    "DownloadHistory",
    "Downloader",
    "FeedItem",
    "FeedWatcher",
    "HistoryEntry",
    "Notifier",
    "NullNotifier",
    "TitleMatcher",
    "filename_for",
    "parse_feed",
]
