"""
Top-level `.slp` container.

A replay is a UBJSON map with two keys, `raw` and `metadata`, always in that order:

  {U\\x03raw[$U#l <u32 length> <raw event stream> U\\x08metadata{ ... } }

Rather than run a general UBJSON parser over the raw block we match the framing
bytes literally, the same way the official Slippi tooling does.
"""

from __future__ import annotations

import io
import logging
from typing import Final

from .errors import ParseError
from .handlers import Handlers
from .options import DEFAULT_OPTIONS, ParseOptions
from .primitives import Reader, expect_bytes, read_u32
from .stream import parse_raw
from .ubjson import parse_map

logger = logging.getLogger(__name__)

# top-level opening brace, `raw` key & strongly-typed uint8 array header
RAW_PROLOGUE: Final[bytes] = b"{U\x03raw[$U#l"
# `metadata` key & the opening brace of its map value
METADATA_PROLOGUE: Final[bytes] = b"U\x08metadata{"
# top-level closing brace
EPILOGUE: Final[bytes] = b"}"


class _CountingReader:
    """Wraps a source so errors can report how far into it we got."""

    __slots__ = ("_source", "_position")

    def __init__(self, source: Reader) -> None:
        self._source = source
        self._position = 0

    def read(self, size: int = -1, /) -> bytes:
        data = self._source.read(size)
        if data:
            self._position += len(data)
        return data

    def tell(self) -> int:
        return self._position


def _annotate(exc: ParseError, reader: _CountingReader) -> None:
    if exc.offset is None:
        exc.offset = reader.tell()


def parse(source: Reader, handlers: Handlers | None = None, options: ParseOptions | None = None) -> None:
    """Decode a replay from `source`, pushing events to `handlers` as they occur.

    `source` only needs a `read(n)` method. Decoding problems raise a `ParseError`
    subclass; exceptions raised by `handlers` propagate unchanged.
    """

    handlers = Handlers() if handlers is None else handlers
    options = DEFAULT_OPTIONS if options is None else options
    reader = _CountingReader(source)

    try:
        expect_bytes(reader, RAW_PROLOGUE)
        raw_len = read_u32(reader)
    except ParseError as exc:
        _annotate(exc, reader)
        raise
    logger.debug("raw length: %d", raw_len)

    parse_raw(reader, raw_len, handlers, options)

    try:
        expect_bytes(reader, METADATA_PROLOGUE)
        # The opening brace was part of the prologue; `parse_map` consumes the closing one.
        metadata = parse_map(reader)
    except ParseError as exc:
        _annotate(exc, reader)
        raise
    handlers.metadata(metadata)

    try:
        expect_bytes(reader, EPILOGUE)
    except ParseError as exc:
        _annotate(exc, reader)
        raise


def parse_bytes(data: bytes, handlers: Handlers | None = None, options: ParseOptions | None = None) -> None:
    parse(io.BytesIO(data), handlers, options)


__all__ = [
    "EPILOGUE",
    "METADATA_PROLOGUE",
    "RAW_PROLOGUE",
    "parse",
    "parse_bytes",
]
