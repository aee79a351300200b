"""
UBJSON subset used by the replay metadata block.

Only three value types ever appear there: `S` strings (always with a `U` length),
`l` int32 and `{` maps. Keys are `U`-length-prefixed UTF-8.
"""

from __future__ import annotations

from typing import Final, TypeAlias, Union

from .errors import InvalidText, MalformedMetadata, UnsupportedValueType
from .primitives import Reader, read_bytes, read_i32, read_u8

Object: TypeAlias = Union[int, str, dict[str, "Object"]]

MARKER_STRING: Final[int] = 0x53  # S
MARKER_INT32: Final[int] = 0x6C  # l
MARKER_UINT8: Final[int] = 0x55  # U
MARKER_MAP_OPEN: Final[int] = 0x7B  # {
MARKER_MAP_CLOSE: Final[int] = 0x7D  # }

# Producers nest at most three maps deep.
MAX_DEPTH: Final[int] = 64


def _parse_utf8(reader: Reader) -> str:
    length = read_u8(reader)
    raw = read_bytes(reader, length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidText(f"invalid UTF-8 in metadata string: {raw!r}") from exc


def parse_value(reader: Reader, depth: int = 0) -> Object:
    marker = read_u8(reader)
    if marker == MARKER_STRING:
        length_marker = read_u8(reader)
        if length_marker != MARKER_UINT8:
            raise MalformedMetadata(f"expected {MARKER_UINT8:#x} for string length, got {length_marker:#x}")
        return _parse_utf8(reader)
    if marker == MARKER_INT32:
        return read_i32(reader)
    if marker == MARKER_MAP_OPEN:
        return parse_map(reader, depth + 1)
    raise UnsupportedValueType(f"unexpected UBJSON value type: {marker:#x}")


def _parse_key(reader: Reader) -> str | None:
    marker = read_u8(reader)
    if marker == MARKER_UINT8:
        return _parse_utf8(reader)
    if marker == MARKER_MAP_CLOSE:
        return None
    raise MalformedMetadata(f"unexpected UBJSON key type: {marker:#x}")


def parse_map(reader: Reader, depth: int = 0) -> dict[str, Object]:
    """Parse map entries up to and including the closing `}`.

    The opening `{` must already have been consumed by the caller.
    """

    if depth > MAX_DEPTH:
        raise MalformedMetadata(f"metadata nested deeper than {MAX_DEPTH} maps")

    out: dict[str, Object] = {}
    while (key := _parse_key(reader)) is not None:
        out[key] = parse_value(reader, depth)
    return out


__all__ = ["MAX_DEPTH", "Object", "parse_map", "parse_value"]
