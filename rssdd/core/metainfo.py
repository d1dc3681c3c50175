"""Helpers for inspecting bencoded torrent metainfo.

The codec itself knows nothing about torrents; these helpers read the few
fields needed to describe a downloaded metainfo file and compute its info
hash from the canonical encoding of the ``info`` dictionary.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

from rssdd.core.bencode import DEFAULT_MAX_DEPTH, BencodeValue, decode, encode
from rssdd.utils.exceptions import BencodeError, TorrentError


@dataclass(frozen=True)
class MetainfoSummary:
    """Top-level facts about a torrent metainfo file."""

    name: str
    info_hash: bytes
    total_length: int
    file_count: int
    announce: str | None = None

    @property
    def info_hash_hex(self) -> str:
        """Info hash as lowercase hex."""
        return self.info_hash.hex()


def describe_shape(value: BencodeValue) -> list[str]:
    """Describe the top-level shape of a decoded value.

    Dictionaries are described by their keys in canonical order; every
    other shape by its type name.
    """
    if isinstance(value, bool):
        msg = f"Not a bencode value: {type(value).__name__}"
        raise TypeError(msg)
    if isinstance(value, int):
        return ["int"]
    if isinstance(value, bytes):
        return ["string"]
    if isinstance(value, list):
        return ["list"]
    if isinstance(value, dict):
        return [key.decode("utf-8", errors="replace") for key in sorted(value)]
    msg = f"Not a bencode value: {type(value).__name__}"
    raise TypeError(msg)


def info_hash(metainfo: dict[bytes, Any]) -> bytes:
    """Return the SHA-1 of the canonical encoding of ``metainfo[b"info"]``."""
    info = metainfo.get(b"info")
    if not isinstance(info, dict):
        msg = "Missing or invalid info dictionary in metainfo"
        raise TorrentError(msg)
    return hashlib.sha1(encode(info)).digest()  # nosec B324 - SHA-1 required by BitTorrent protocol (BEP 3)


def summarize(data: bytes, max_depth: int | None = DEFAULT_MAX_DEPTH) -> MetainfoSummary:
    """Decode torrent metainfo and summarize it.

    Raises:
        TorrentError: If the data is not bencoded or lacks an info dictionary

    """
    try:
        metainfo = decode(data, max_depth=max_depth)
    except BencodeError as e:
        msg = f"Failed to decode metainfo: {e}"
        raise TorrentError(msg) from e

    return summarize_value(metainfo)


def summarize_value(metainfo: BencodeValue) -> MetainfoSummary:
    """Summarize already-decoded torrent metainfo."""
    if not isinstance(metainfo, dict):
        msg = "Metainfo must be a dictionary"
        raise TorrentError(msg)

    digest = info_hash(metainfo)
    info = metainfo[b"info"]

    files = info.get(b"files")
    if isinstance(files, list):
        lengths = [f.get(b"length", 0) for f in files if isinstance(f, dict)]
        total_length = sum(n for n in lengths if isinstance(n, int))
        file_count = len(files)
    else:
        length = info.get(b"length", 0)
        total_length = length if isinstance(length, int) else 0
        file_count = 1

    name = info.get(b"name", b"")
    announce = metainfo.get(b"announce")
    return MetainfoSummary(
        name=_text(name) if isinstance(name, bytes) else "",
        info_hash=digest,
        total_length=total_length,
        file_count=file_count,
        announce=_text(announce) if isinstance(announce, bytes) else None,
    )


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")
