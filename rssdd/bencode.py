"""Bencoding module.

This module provides a convenient interface to the core bencode functionality.
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
from rssdd.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    BencodeIOError,
    DepthExceededError,
    InvalidIntegerError,
    InvalidLengthError,
    TrailingDataError,
    UnexpectedEofError,
)

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeError",
    "BencodeIOError",
    "BencodeValue",
    "ByteCursor",
    "DepthExceededError",
    "InvalidIntegerError",
    "InvalidLengthError",
    "TrailingDataError",
    "UnexpectedEofError",
    "decode",
    "decode_list_body",
    "decode_prefix",
    "encode",
    "iter_decode",
]
