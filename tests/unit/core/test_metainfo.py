"""Tests for metainfo inspection helpers."""

from __future__ import annotations

import hashlib

import pytest

from rssdd.core.bencode import encode
from rssdd.core.metainfo import (
    MetainfoSummary,
    describe_shape,
    info_hash,
    summarize,
    summarize_value,
)
from rssdd.utils.exceptions import TorrentError

pytestmark = [pytest.mark.unit, pytest.mark.core]


class TestDescribeShape:
    """Test top-level shape descriptions."""

    def test_scalars(self):
        assert describe_shape(42) == ["int"]
        assert describe_shape(b"spam") == ["string"]
        assert describe_shape([1, 2]) == ["list"]

    def test_dict_keys_sorted(self):
        """Dictionary keys are listed in byte order."""
        value = {b"info": {}, b"announce": b"x", b"comment": b"y"}
        assert describe_shape(value) == ["announce", "comment", "info"]

    def test_empty_dict(self):
        assert describe_shape({}) == []

    def test_undecodable_key(self):
        """Non-UTF-8 keys are shown with replacement characters."""
        assert describe_shape({b"\xff": 1}) == ["�"]

    @pytest.mark.parametrize("value", [True, 1.0, None, "text"])
    def test_not_a_value(self, value):
        with pytest.raises(TypeError):
            describe_shape(value)


class TestInfoHash:
    """Test info hash computation."""

    def test_hash_of_canonical_info(self, torrent_dict):
        """The hash covers the canonical encoding of the info dictionary."""
        expected = hashlib.sha1(encode(torrent_dict[b"info"])).digest()
        assert info_hash(torrent_dict) == expected

    def test_hash_independent_of_key_order(self, torrent_dict):
        reordered = dict(reversed(list(torrent_dict[b"info"].items())))
        assert info_hash({b"info": reordered}) == info_hash(torrent_dict)

    @pytest.mark.parametrize("metainfo", [{}, {b"info": b"oops"}, {b"info": [1]}])
    def test_missing_info(self, metainfo):
        with pytest.raises(TorrentError):
            info_hash(metainfo)


class TestSummarize:
    """Test metainfo summaries."""

    def test_single_file(self, torrent_bytes, torrent_dict):
        summary = summarize(torrent_bytes)
        assert isinstance(summary, MetainfoSummary)
        assert summary.name == "test.bin"
        assert summary.total_length == 1024
        assert summary.file_count == 1
        assert summary.announce == "http://tracker.example/announce"
        assert summary.info_hash == info_hash(torrent_dict)
        assert summary.info_hash_hex == summary.info_hash.hex()

    def test_multi_file(self):
        metainfo = {
            b"info": {
                b"name": b"album",
                b"files": [
                    {b"length": 100, b"path": [b"01.flac"]},
                    {b"length": 250, b"path": [b"02.flac"]},
                ],
            },
        }
        summary = summarize(encode(metainfo))
        assert summary.name == "album"
        assert summary.total_length == 350
        assert summary.file_count == 2
        assert summary.announce is None

    def test_invalid_bencode(self):
        """Decode failures are reported as TorrentError."""
        with pytest.raises(TorrentError, match="Failed to decode"):
            summarize(b"d4:info")

    def test_depth_limit_applies(self, torrent_bytes):
        with pytest.raises(TorrentError):
            summarize(torrent_bytes, max_depth=1)

    def test_not_a_dict(self):
        with pytest.raises(TorrentError):
            summarize_value([b"info"])

    def test_malformed_fields_tolerated(self):
        """Wrongly typed optional fields fall back to defaults."""
        summary = summarize_value(
            {b"announce": 5, b"info": {b"name": 7, b"length": b"big"}}
        )
        assert summary.name == ""
        assert summary.total_length == 0
        assert summary.announce is None
