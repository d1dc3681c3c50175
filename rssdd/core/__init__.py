"""Core bencode codec and metainfo helpers.

This package contains:
- Bencoding (encoding/decoding)
- Torrent metainfo inspection
"""

from __future__ import annotations

from rssdd.core.bencode import (
    DEFAULT_MAX_DEPTH,
    BencodeDecoder,
    BencodeEncoder,
    BencodeValue,
    ByteCursor,
    decode,
    decode_list_body,
    decode_prefix,
    encode,
    iter_decode,
)
from rssdd.core.metainfo import (
    MetainfoSummary,
    describe_shape,
    info_hash,
    summarize,
    summarize_value,
)

__all__ = [
    "DEFAULT_MAX_DEPTH",
    # Bencoding
    "BencodeDecoder",
    "BencodeEncoder",
    "BencodeValue",
    "ByteCursor",
    # Metainfo
    "MetainfoSummary",
    "decode",
    "decode_list_body",
    "decode_prefix",
    "describe_shape",
    "encode",
    "info_hash",
    "iter_decode",
    "summarize",
    "summarize_value",
]
