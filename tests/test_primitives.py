from __future__ import annotations

import io

import pytest

from slpstream.errors import InvalidDiscriminant, MalformedEnvelope, TruncatedInput
from slpstream.primitives import (
    decode_fixed_text,
    expect_bytes,
    extension,
    optional_enum,
    payload_stream,
    read_bytes,
    read_f32,
    read_i32,
    read_u16,
    read_u32,
    remaining,
    tell,
    to_enum,
)
from slpstream.types import EndMethod, LCancel, PlayerType


def test_big_endian_reads() -> None:
    r = io.BytesIO(b"\x01\x02" + b"\xde\xad\xbe\xef" + b"\xff\xff\xff\x85" + b"\x3f\x80\x00\x00")

    assert read_u16(r) == 0x0102
    assert read_u32(r) == 0xDEADBEEF
    assert read_i32(r) == -123
    assert read_f32(r) == 1.0


def test_short_reads_raise_truncated_input() -> None:
    with pytest.raises(TruncatedInput):
        read_u32(io.BytesIO(b"\x00\x01"))
    with pytest.raises(TruncatedInput, match="wanted 4 bytes, got 2"):
        read_bytes(io.BytesIO(b"ab"), 4)


def test_read_bytes_zero_is_empty() -> None:
    assert read_bytes(io.BytesIO(b""), 0) == b""


def test_expect_bytes_mismatch_is_malformed_envelope() -> None:
    expect_bytes(io.BytesIO(b"{U"), b"{U")
    with pytest.raises(MalformedEnvelope):
        expect_bytes(io.BytesIO(b"[U"), b"{U")


def test_tell_on_unseekable_reader_is_none() -> None:
    class _Pipe:
        def read(self, size: int = -1, /) -> bytes:
            return b""

    assert tell(_Pipe()) is None
    r = io.BytesIO(b"abc")
    r.read(2)
    assert tell(r) == 2


def test_decode_fixed_text_stops_at_first_zero() -> None:
    raw = "ＦＯＸ".encode("shift_jis").ljust(16, b"\x00")
    assert decode_fixed_text(raw, "shift_jis") == "ＦＯＸ"
    assert decode_fixed_text(b"AB\x00CD", "utf-8") == "AB"
    assert decode_fixed_text(b"\x00" * 4, "utf-8") == ""


def test_decode_fixed_text_replaces_invalid_sequences() -> None:
    assert decode_fixed_text(b"A\xff\x00", "utf-8") == "A\ufffd"


def _first_byte(r: io.BytesIO) -> int:
    return r.read(1)[0]


def test_extension_absent_when_payload_exhausted() -> None:
    r = payload_stream(b"\x07")

    assert remaining(r) == 1
    assert extension(r, _first_byte) == 7
    assert remaining(r) == 0
    assert extension(r, _first_byte) is None


def test_to_enum_rejects_unknown_values_of_closed_enums() -> None:
    assert to_enum(PlayerType, 1) is PlayerType.CPU
    with pytest.raises(InvalidDiscriminant, match="invalid PlayerType: 9"):
        to_enum(PlayerType, 9)


def test_to_enum_keeps_unnamed_values_of_open_enums() -> None:
    assert to_enum(EndMethod, 7) is EndMethod.NO_CONTEST
    assert EndMethod.NO_CONTEST.is_known

    method = to_enum(EndMethod, 5)
    assert isinstance(method, EndMethod)
    assert method == 5
    assert method.name == "UNKNOWN_5"
    assert not method.is_known


def test_optional_enum_maps_zero_to_none() -> None:
    assert optional_enum(LCancel, 0) is None
    assert optional_enum(LCancel, 2) is LCancel.UNSUCCESSFUL

    unnamed = optional_enum(LCancel, 3)
    assert unnamed is not None
    assert int(unnamed) == 3
