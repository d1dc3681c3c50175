"""rssdd - RSS download daemon built around a bencode codec."""

from __future__ import annotations

__version__ = "0.1.0"

from rssdd.core.bencode import (
    BencodeDecoder,
    BencodeEncoder,
    decode,
    decode_prefix,
    encode,
    iter_decode,
)
from rssdd.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    RssddError,
)

__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeError",
    "RssddError",
    "__version__",
    "decode",
    "decode_prefix",
    "encode",
    "iter_decode",
]
