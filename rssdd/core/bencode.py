"""Bencode encoding and decoding.

Bencode represents four shapes without an external schema:

- integers: ``i<digits>e``
- byte strings: ``<length>:<bytes>``
- lists: ``l<values>e``
- dictionaries: ``d<key><value>...e`` with byte string keys

Decoded values use plain Python types (``int``, ``bytes``, ``list`` and
``dict`` keyed by ``bytes``). Encoding always produces the canonical form,
with dictionary keys sorted by raw byte order.
"""

from __future__ import annotations

import re
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union

from rssdd.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeIOError,
    DepthExceededError,
    InvalidIntegerError,
    InvalidLengthError,
    TrailingDataError,
    UnexpectedEofError,
)

BencodeValue = Union[int, bytes, List["BencodeValue"], Dict[bytes, "BencodeValue"]]
ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]

DEFAULT_MAX_DEPTH = 256

_INT = ord("i")
_LIST = ord("l")
_DICT = ord("d")
_END = ord("e")
_COLON = ord(":")
_ZERO = ord("0")
_NINE = ord("9")

_INTEGER_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")

# Returned by BencodeDecoder._decode_next when it pushed a new container
_OPENED = object()

# Upper bound for a single read() on stream sources; declared string
# lengths come from untrusted input.
_READ_CHUNK = 64 * 1024


class ByteCursor:
    """Forward-only reader over a byte source with one byte of pushback.

    The source is either an in-memory buffer or a binary file object.
    ``OSError`` or ``ValueError`` raised by a file object is wrapped in
    ``BencodeIOError``.
    """

    def __init__(self, source: ByteSource):
        """Initialize cursor at the start of ``source``."""
        if isinstance(source, str):
            msg = "Bencoded data must be bytes, not str"
            raise TypeError(msg)
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._data: Optional[bytes] = bytes(source)
            self._stream: Optional[BinaryIO] = None
        else:
            self._data = None
            self._stream = source
        self._offset = 0
        self._pos = 0
        self._last: Optional[int] = None
        self._pushed = False

    @property
    def pos(self) -> int:
        """Number of bytes consumed so far."""
        return self._pos

    def read_byte(self, context: str = "value") -> int:
        """Read the next byte.

        Raises:
            UnexpectedEofError: If the source is exhausted.

        """
        if self._pushed:
            self._pushed = False
            self._pos += 1
            return self._last  # type: ignore[return-value]

        chunk = self._read_raw(1)
        if not chunk:
            raise UnexpectedEofError(context, self._pos)
        self._last = chunk[0]
        self._pos += 1
        return self._last

    def unread_byte(self) -> None:
        """Push the most recently read byte back to the front of the stream."""
        if self._last is None or self._pushed:
            msg = "unread_byte() must follow a read_byte() call"
            raise RuntimeError(msg)
        self._pushed = True
        self._pos -= 1

    def read_exact(self, n: int, context: str = "string") -> bytes:
        """Read exactly ``n`` bytes.

        Raises:
            UnexpectedEofError: If fewer than ``n`` bytes remain.

        """
        if n < 0:
            msg = f"Cannot read a negative number of bytes: {n}"
            raise ValueError(msg)
        if n == 0:
            return b""

        buf = bytearray()
        if self._pushed:
            buf.append(self._last)  # type: ignore[arg-type]
            self._pushed = False
        if len(buf) < n:
            buf += self._read_raw(n - len(buf))
        self._last = None
        self._pos += len(buf)

        if len(buf) < n:
            raise UnexpectedEofError(context, self._pos)
        return bytes(buf)

    def at_end(self) -> bool:
        """Return True if no bytes remain."""
        if self._pushed:
            return False
        if self._data is not None:
            return self._offset >= len(self._data)
        try:
            self.read_byte()
        except UnexpectedEofError:
            return True
        self.unread_byte()
        return False

    def _read_raw(self, n: int) -> bytes:
        if self._data is not None:
            chunk = self._data[self._offset : self._offset + n]
            self._offset += len(chunk)
            return chunk

        parts = []
        remaining = n
        while remaining > 0:
            try:
                chunk = self._stream.read(min(remaining, _READ_CHUNK))  # type: ignore[union-attr]
            except (OSError, ValueError) as e:
                # ValueError: read on a closed or detached file object
                raise BencodeIOError(e) from e
            if not chunk:
                break
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)


class BencodeDecoder:
    """Decoder reading one value from a byte source."""

    def __init__(
        self,
        data: ByteSource | ByteCursor,
        max_depth: int | None = DEFAULT_MAX_DEPTH,
    ):
        """Initialize decoder.

        Args:
            data: Bytes, binary file object, or an existing cursor
            max_depth: Maximum list/dict nesting; None disables the check

        """
        self.cursor = data if isinstance(data, ByteCursor) else ByteCursor(data)
        self.max_depth = max_depth
        self._depth = 0

    @property
    def pos(self) -> int:
        """Number of bytes consumed so far."""
        return self.cursor.pos

    def decode(self) -> BencodeValue:
        """Decode exactly one value, leaving any following bytes unread."""
        return self._decode([], [])

    def decode_list_body(self) -> list[BencodeValue]:
        """Decode list elements up to and including the closing 'e'.

        Used when the leading 'l' has already been consumed by the caller.
        """
        self._enter()
        return self._decode([[]], [None])  # type: ignore[return-value]

    def _decode(
        self,
        stack: list[list[BencodeValue] | dict[bytes, BencodeValue]],
        keys: list[bytes | None],
    ) -> BencodeValue:
        """Decode one value with an explicit stack of open containers.

        Nesting depth is bounded only by ``max_depth``, never by the
        interpreter's recursion limit. ``keys[i]`` is the key of ``stack[i]``
        still waiting for its value, or None.
        """
        while True:
            if stack and keys[-1] is None:
                container = stack[-1]
                is_list = isinstance(container, list)
                b = self.cursor.read_byte("list" if is_list else "dict")
                if b == _END:
                    stack.pop()
                    keys.pop()
                    self._depth -= 1
                    value: Any = container
                elif is_list:
                    self.cursor.unread_byte()
                    value = self._decode_next(stack, keys)
                else:
                    self.cursor.unread_byte()
                    keys[-1] = self._decode_string()
                    continue
            else:
                value = self._decode_next(stack, keys)

            if value is _OPENED:
                continue
            if not stack:
                return value

            parent = stack[-1]
            if isinstance(parent, list):
                parent.append(value)
            else:
                # Last occurrence of a duplicate key wins
                parent[keys[-1]] = value  # type: ignore[index]
                keys[-1] = None

    def _decode_next(
        self,
        stack: list[list[BencodeValue] | dict[bytes, BencodeValue]],
        keys: list[bytes | None],
    ) -> Any:
        """Decode a scalar, or open a container and return ``_OPENED``."""
        tag = self.cursor.read_byte("value")
        if tag == _INT:
            return self._decode_int()
        if tag in (_LIST, _DICT):
            self._enter()
            stack.append([] if tag == _LIST else {})
            keys.append(None)
            return _OPENED
        self.cursor.unread_byte()
        return self._decode_string()

    def _decode_int(self) -> int:
        raw = bytearray()
        while True:
            b = self.cursor.read_byte("integer")
            if b == _END:
                break
            raw.append(b)

        span = bytes(raw)
        if _INTEGER_RE.fullmatch(span) is None or span == b"-0":
            raise InvalidIntegerError(span)
        try:
            return int(span)
        except ValueError as e:
            # int() refuses digit strings beyond sys.get_int_max_str_digits()
            raise InvalidIntegerError(span) from e

    def _decode_string(self) -> bytes:
        raw = bytearray()
        while True:
            b = self.cursor.read_byte("string")
            if b == _COLON:
                break
            if not _ZERO <= b <= _NINE:
                raw.append(b)
                raise InvalidLengthError(bytes(raw))
            raw.append(b)

        span = bytes(raw)
        if not span or (len(span) > 1 and span[0] == _ZERO):
            raise InvalidLengthError(span)
        try:
            length = int(span)
        except ValueError as e:
            raise InvalidLengthError(span) from e
        return self.cursor.read_exact(length, "string")

    def _enter(self) -> None:
        self._depth += 1
        if self.max_depth is not None and self._depth > self.max_depth:
            raise DepthExceededError(self.max_depth)


class _Close:
    """Work item emitting the 'e' that ends the container ``ident``."""

    __slots__ = ("ident",)

    def __init__(self, ident: int):
        self.ident = ident


class BencodeEncoder:
    """Encoder producing the canonical bencoding of a value."""

    def encode(self, value: Any) -> bytes:
        """Encode ``value``.

        ``str`` values and keys are accepted and encoded as UTF-8. Nesting
        depth is not limited by the interpreter's recursion limit.

        Raises:
            BencodeEncodeError: If the value contains an unsupported type
                or a reference cycle.

        """
        out = bytearray()
        open_ids: set[int] = set()
        work: list[Any] = [value]
        while work:
            item = work.pop()
            if isinstance(item, _Close):
                out += b"e"
                open_ids.discard(item.ident)
            elif isinstance(item, (list, tuple, dict)):
                ident = id(item)
                if ident in open_ids:
                    msg = "Value contains a reference cycle"
                    raise BencodeEncodeError(msg)
                open_ids.add(ident)
                work.append(_Close(ident))
                if isinstance(item, dict):
                    out += b"d"
                    entries = self._dict_entries(item)
                    # Pushed in reverse so keys come off the stack sorted
                    for raw_key in sorted(entries, reverse=True):
                        work.append(entries[raw_key])
                        work.append(raw_key)
                else:
                    out += b"l"
                    work.extend(reversed(item))
            else:
                self._encode_scalar(item, out)
        return bytes(out)

    def _encode_scalar(self, value: Any, out: bytearray) -> None:
        if isinstance(value, bool):
            msg = "Cannot bencode bool; use an int"
            raise BencodeEncodeError(msg)
        if isinstance(value, int):
            try:
                out += b"i%de" % value
            except ValueError as e:
                msg = f"Integer too large to encode: {e}"
                raise BencodeEncodeError(msg) from e
        elif isinstance(value, (bytes, bytearray, memoryview, str)):
            data = _as_bytes(value)
            out += b"%d:" % len(data)
            out += data
        else:
            msg = f"Cannot bencode type {type(value).__name__}"
            raise BencodeEncodeError(msg)

    def _dict_entries(self, value: dict[Any, Any]) -> dict[bytes, Any]:
        entries: dict[bytes, Any] = {}
        for key, item in value.items():
            if not isinstance(key, (bytes, bytearray, str)):
                msg = f"Dictionary keys must be bytes or str, not {type(key).__name__}"
                raise BencodeEncodeError(msg)
            raw_key = _as_bytes(key)
            if raw_key in entries:
                msg = f"Duplicate dictionary key after normalization: {raw_key!r}"
                raise BencodeEncodeError(msg)
            entries[raw_key] = item
        return entries


def _as_bytes(value: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(value, str):
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as e:
            msg = f"String is not encodable as UTF-8: {e}"
            raise BencodeEncodeError(msg) from e
    return bytes(value)


def decode(
    data: ByteSource,
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
    strict: bool = False,
) -> BencodeValue:
    """Decode one bencoded value.

    Bytes after the first complete value are ignored unless ``strict`` is
    set, in which case they raise ``TrailingDataError``.
    """
    decoder = BencodeDecoder(data, max_depth=max_depth)
    value = decoder.decode()
    if strict and not decoder.cursor.at_end():
        raise TrailingDataError(decoder.pos)
    return value


def decode_prefix(
    data: ByteSource,
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> tuple[BencodeValue, int]:
    """Decode one value and return it with the number of bytes consumed."""
    decoder = BencodeDecoder(data, max_depth=max_depth)
    value = decoder.decode()
    return value, decoder.pos


def decode_list_body(
    data: ByteSource,
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> list[BencodeValue]:
    """Decode a sequence of values terminated by 'e' (a list without its 'l')."""
    return BencodeDecoder(data, max_depth=max_depth).decode_list_body()


def iter_decode(
    data: ByteSource,
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> Iterator[BencodeValue]:
    """Yield each value of a concatenation of complete bencoded values."""
    cursor = ByteCursor(data)
    while not cursor.at_end():
        yield BencodeDecoder(cursor, max_depth=max_depth).decode()


def encode(value: Any) -> bytes:
    """Encode a value to canonical bencode."""
    return BencodeEncoder().encode(value)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeValue",
    "ByteCursor",
    "decode",
    "decode_list_body",
    "decode_prefix",
    "encode",
    "iter_decode",
]
