"""
Primitive codec: big-endian fixed-width reads over any `read(n)` source.

Record layouts themselves are construct `Struct`s (see `game.py` / `frame.py`);
this module owns the translation of construct failures into `ParseError`s and
the handful of reads that sit outside a struct (code bytes, raw payloads,
fixed-width text fields).
"""

from __future__ import annotations

import io
from enum import IntEnum
from typing import Any, Callable, Final, Protocol, TypeVar

from construct import Construct, ConstructError, Float32b, Int8sb, Int8ub, Int16ub, Int32sb, Int32ub, StreamError

from .errors import InvalidDiscriminant, MalformedEnvelope, ParseError, TruncatedInput

U8: Final = Int8ub
I8: Final = Int8sb
U16: Final = Int16ub
U32: Final = Int32ub
I32: Final = Int32sb
F32: Final = Float32b


class Reader(Protocol):
    def read(self, size: int = -1, /) -> bytes: ...


def parse(reader: Reader, subcon: Construct) -> Any:
    try:
        return subcon.parse_stream(reader)
    except StreamError as exc:
        raise TruncatedInput(f"unexpected EOF: {exc}") from exc
    except ConstructError as exc:
        raise ParseError(str(exc)) from exc


def read_u8(reader: Reader) -> int:
    return int(parse(reader, U8))


def read_u16(reader: Reader) -> int:
    return int(parse(reader, U16))


def read_u32(reader: Reader) -> int:
    return int(parse(reader, U32))


def read_i32(reader: Reader) -> int:
    return int(parse(reader, I32))


def read_f32(reader: Reader) -> float:
    return float(parse(reader, F32))


def read_bytes(reader: Reader, size: int) -> bytes:
    if size == 0:
        return b""
    data = reader.read(size)
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise TruncatedInput(f"unexpected EOF: wanted {size} bytes, got {got}")
    return bytes(data)


def expect_bytes(reader: Reader, expected: bytes) -> None:
    actual = read_bytes(reader, len(expected))
    if actual != expected:
        raise MalformedEnvelope(f"expected {expected!r}, got {actual!r}")


def tell(reader: Reader) -> int | None:
    """Best-effort current offset of `reader` (`None` for unseekable sources)."""
    tell_fn = getattr(reader, "tell", None)
    if tell_fn is None:
        return None
    try:
        return int(tell_fn())
    except (OSError, ValueError):
        return None


def payload_stream(data: bytes) -> io.BytesIO:
    return io.BytesIO(data)


def remaining(stream: io.BytesIO) -> int:
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return end - pos


def decode_fixed_text(raw: bytes, encoding: str) -> str:
    """Decode a fixed-width, zero-terminated text field.

    Everything from the first zero byte on is dropped. Undecodable sequences become
    U+FFFD rather than failing: the game writes these fields from player input and
    the producer never validates them.
    """

    end = raw.find(b"\x00")
    if end >= 0:
        raw = raw[:end]
    return raw.decode(encoding, errors="replace")


T = TypeVar("T")


def extension(stream: io.BytesIO, decode: Callable[[io.BytesIO], T]) -> T | None:
    """Decode the next versioned extension, or `None` if the payload ends here."""
    if remaining(stream) <= 0:
        return None
    return decode(stream)


E = TypeVar("E", bound=IntEnum)


def to_enum(enum_cls: type[E], value: int) -> E:
    """Closed enums reject unnamed values; `OpenIntEnum`s pass them through."""
    try:
        return enum_cls(int(value))
    except ValueError as exc:
        raise InvalidDiscriminant(f"invalid {enum_cls.__name__}: {value}") from exc


def optional_enum(enum_cls: type[E], value: int) -> E | None:
    """Wire value 0 means "absent"; anything else is a present value."""
    if int(value) == 0:
        return None
    return to_enum(enum_cls, value)


__all__ = [
    "F32",
    "I8",
    "I32",
    "Reader",
    "U8",
    "U16",
    "U32",
    "decode_fixed_text",
    "expect_bytes",
    "extension",
    "optional_enum",
    "parse",
    "payload_stream",
    "read_bytes",
    "read_f32",
    "read_i32",
    "read_u8",
    "read_u16",
    "read_u32",
    "remaining",
    "tell",
    "to_enum",
]
