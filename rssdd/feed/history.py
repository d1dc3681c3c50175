"""Persistent record of downloaded feed items.

Backed by SQLite so that items are only fetched once across restarts.
"""

from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from rssdd.feed.parser import FeedItem
from rssdd.utils.exceptions import StorageError
from rssdd.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A row of the download history."""

    title: str
    link: str
    created_at: float


class DownloadHistory:
    """SQLite-backed download history.

    Attributes:
        db_path: Path to the SQLite database, or ":memory:"

    """

    def __init__(self, db_path: Path | str):
        """Initialize history; call ``initialize()`` before use."""
        self.db_path = db_path
        self._db: sqlite3.Connection | None = None

    def initialize(self) -> None:
        """Open the database and create the schema if needed."""
        if self._db is not None:
            return
        try:
            if str(self.db_path) != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            db = sqlite3.connect(str(self.db_path))
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS downloads (
                    id INTEGER NOT NULL PRIMARY KEY,
                    title TEXT,
                    link TEXT,
                    created_at REAL
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_downloads_link ON downloads(link)")
            db.commit()
        except (OSError, sqlite3.Error) as e:
            msg = f"Failed to open download history {self.db_path}: {e}"
            raise StorageError(msg) from e
        self._db = db
        logger.debug("Opened download history at %s", self.db_path)

    @property
    def db(self) -> sqlite3.Connection:
        if self._db is None:
            msg = "Download history is not initialized"
            raise StorageError(msg)
        return self._db

    def contains(self, link: str) -> bool:
        """Return True if ``link`` has already been downloaded."""
        try:
            cursor = self.db.execute(
                "SELECT COUNT(*) FROM downloads WHERE link = ?", (link,)
            )
            (count,) = cursor.fetchone()
        except sqlite3.Error as e:
            msg = f"Failed to query download history: {e}"
            raise StorageError(msg) from e
        return count > 0

    def add(self, item: FeedItem) -> None:
        """Record ``item`` as downloaded."""
        try:
            self.db.execute(
                "INSERT INTO downloads (link, title, created_at) VALUES (?, ?, ?)",
                (item.link, item.title, time.time()),
            )
            self.db.commit()
        except sqlite3.Error as e:
            msg = f"Failed to record download {item.link}: {e}"
            raise StorageError(msg) from e

    def recent(self, limit: int = 20) -> list[HistoryEntry]:
        """Return the most recent downloads, newest first."""
        try:
            rows = self.db.execute(
                "SELECT title, link, created_at FROM downloads "
                "ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as e:
            msg = f"Failed to query download history: {e}"
            raise StorageError(msg) from e
        return [
            HistoryEntry(title=title or "", link=link or "", created_at=created or 0.0)
            for title, link, created in rows
        ]

    def close(self) -> None:
        """Close the database."""
        if self._db is not None:
            self._db.close()
            self._db = None

    def __enter__(self) -> DownloadHistory:
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
