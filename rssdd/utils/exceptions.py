"""Exception hierarchy for rssdd.

Provides a single exception tree for the bencode codec and the feed
watcher built on top of it.
"""

from __future__ import annotations

from typing import Any


class RssddError(Exception):
    """Base exception for all rssdd errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize rssdd error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(RssddError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class TorrentError(ValidationError):
    """Torrent metainfo validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class BencodeDecodeError(BencodeError):
    """Input could not be decoded as a single bencoded value."""


class UnexpectedEofError(BencodeDecodeError):
    """The byte source ended before a value was structurally complete."""

    def __init__(self, context: str, position: int | None = None):
        """Initialize with the construct that was being parsed."""
        super().__init__(
            f"unexpected EOF when decoding {context}",
            {"context": context, "position": position},
        )
        self.context = context
        self.position = position


class InvalidIntegerError(BencodeDecodeError):
    """The span between 'i' and 'e' is not a canonical signed integer."""

    def __init__(self, raw: bytes):
        """Initialize with the offending digit span."""
        super().__init__(f"invalid integer {raw!r}", {"raw": raw})
        self.raw = raw


class InvalidLengthError(BencodeDecodeError):
    """The span before ':' is not a canonical non-negative length."""

    def __init__(self, raw: bytes):
        """Initialize with the offending length span."""
        super().__init__(f"invalid string length {raw!r}", {"raw": raw})
        self.raw = raw


class DepthExceededError(BencodeDecodeError):
    """Container nesting exceeded the configured maximum."""

    def __init__(self, limit: int):
        """Initialize with the depth limit that was exceeded."""
        super().__init__(f"nesting depth exceeds {limit}", {"limit": limit})
        self.limit = limit


class TrailingDataError(BencodeDecodeError):
    """Bytes remained after the top-level value in strict mode."""

    def __init__(self, offset: int):
        """Initialize with where the trailing bytes start."""
        super().__init__(
            f"trailing data after value at offset {offset}", {"offset": offset}
        )
        self.offset = offset


class BencodeIOError(BencodeDecodeError):
    """The underlying byte source reported a fault."""

    def __init__(self, cause: BaseException):
        """Initialize with the wrapped source fault."""
        super().__init__(f"error reading bencoded data: {cause}", {"cause": repr(cause)})
        self.cause = cause


class BencodeEncodeError(BencodeError):
    """A value cannot be represented in bencode."""


class NetworkError(RssddError):
    """Network-related errors."""


class FeedError(NetworkError):
    """Feed retrieval or parsing errors."""


class DownloadError(NetworkError):
    """Resource download errors."""


class NotificationError(NetworkError):
    """Notification delivery errors."""


class StorageError(RssddError):
    """Download history persistence errors."""
