"""Builders for synthetic replay bytes, written against the wire layout directly."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from slpstream.handlers import Handlers

RAW_PROLOGUE = b"{U\x03raw[$U#l"
METADATA_PROLOGUE = b"U\x08metadata{"

PRE_BASE_SIZE = 58
POST_BASE_SIZE = 33
START_BASE_SIZE = 320

EMPTY_PLAYER: dict[str, Any] = {"type": 3}


def player_block(
    *,
    character: int = 0,
    type: int = 3,
    stocks: int = 4,
    costume: int = 0,
    team_shade: int = 0,
    handicap: int = 9,
    team_color: int = 0,
    bitfield: int = 0x40,
    cpu_level: int = 0,
    offense_ratio: float = 1.0,
    defense_ratio: float = 1.0,
    model_scale: float = 1.0,
) -> bytes:
    return struct.pack(
        ">BBBB3xBBB2xB2xB4xfff4x",
        character,
        type,
        stocks,
        costume,
        team_shade,
        handicap,
        team_color,
        bitfield,
        cpu_level,
        offense_ratio,
        defense_ratio,
        model_scale,
    )


def game_start_payload(
    *,
    version: tuple[int, int, int] = (1, 0, 0),
    bitfield: tuple[int, int, int] = (0x32, 0x01, 0x86),
    is_teams: bool = False,
    item_spawn_frequency: int = -1,
    self_destruct_score: int = -1,
    stage: int = 31,
    timer: int = 480,
    damage_ratio: float = 1.0,
    players: Sequence[Mapping[str, Any]] = (EMPTY_PLAYER,) * 4,
    random_seed: int = 0xDEADBEEF,
    ucf: Sequence[tuple[int, int]] | None = None,
    name_tags: Sequence[str] | None = None,
    tail: bytes = b"",
) -> bytes:
    buf = bytearray(START_BASE_SIZE)
    buf[0:3] = bytes(version)
    buf[4] = bitfield[0]
    buf[5] = bitfield[1]
    buf[7] = bitfield[2]
    buf[12] = 1 if is_teams else 0
    struct.pack_into(">bb", buf, 15, item_spawn_frequency, self_destruct_score)
    struct.pack_into(">HI", buf, 18, stage, timer)
    buf[39:44] = b"\x01\x02\x03\x04\x05"
    struct.pack_into(">f", buf, 52, damage_ratio)
    for port, player in enumerate(players):
        buf[100 + 36 * port : 136 + 36 * port] = player_block(**player)
    struct.pack_into(">I", buf, 316, random_seed)

    out = bytes(buf)
    if ucf is not None:
        out += b"".join(struct.pack(">II", dash_back, shield_drop) for dash_back, shield_drop in ucf)
        if name_tags is not None:
            out += b"".join(tag.encode("cp932").ljust(16, b"\x00") for tag in name_tags)
    return out + tail


def game_start_tail(
    *,
    is_pal: bool | None = None,
    is_frozen_ps: bool | None = None,
    scene: tuple[int, int] | None = None,
    netplay: Sequence[tuple[str, str]] | None = None,
    suids: Sequence[str] | None = None,
    language: int | None = None,
    match: tuple[str, int, int] | None = None,
) -> bytes:
    """Start extensions from 1.5.0 on, stopping at the first one left unset."""

    parts: list[bytes] = []
    if is_pal is None:
        return b""
    parts.append(bytes([1 if is_pal else 0]))
    if is_frozen_ps is None:
        return b"".join(parts)
    parts.append(bytes([1 if is_frozen_ps else 0]))
    if scene is None:
        return b"".join(parts)
    parts.append(bytes(scene))
    if netplay is None:
        return b"".join(parts)
    parts.append(b"".join(name.encode("cp932").ljust(31, b"\x00") for name, _code in netplay))
    parts.append(b"".join(code.encode("cp932").ljust(10, b"\x00") for _name, code in netplay))
    if suids is None:
        return b"".join(parts)
    parts.append(b"".join(suid.encode("utf-8").ljust(29, b"\x00") for suid in suids))
    if language is None:
        return b"".join(parts)
    parts.append(bytes([language]))
    if match is None:
        return b"".join(parts)
    match_id, game, tiebreaker = match
    parts.append(match_id.encode("utf-8").ljust(51, b"\x00") + struct.pack(">II", game, tiebreaker))
    return b"".join(parts)


def game_end_payload(
    method: int = 2,
    *,
    lras_initiator: int | None = None,
    placements: Sequence[int] | None = None,
) -> bytes:
    out = bytes([method])
    if lras_initiator is not None:
        out += struct.pack(">b", lras_initiator)
        if placements is not None:
            out += struct.pack(">4b", *placements)
    return out


def pre_payload(
    *,
    index: int = -123,
    port: int = 0,
    is_follower: bool = False,
    random_seed: int = 0x1234,
    state: int = 14,
    position: tuple[float, float] = (1.5, -2.0),
    direction: float = 1.0,
    joystick: tuple[float, float] = (0.0, 0.5),
    cstick: tuple[float, float] = (-0.25, 0.0),
    trigger: float = 0.0,
    buttons_logical: int = 0x80000000,
    buttons_physical: int = 0x0100,
    triggers_physical: tuple[float, float] = (0.25, 0.75),
    raw_analog_x: int | None = None,
    damage: float | None = None,
) -> bytes:
    out = struct.pack(
        ">iBBIHffffffffIHff",
        index,
        port,
        1 if is_follower else 0,
        random_seed,
        state,
        position[0],
        position[1],
        direction,
        joystick[0],
        joystick[1],
        cstick[0],
        cstick[1],
        trigger,
        buttons_logical,
        buttons_physical,
        triggers_physical[0],
        triggers_physical[1],
    )
    if raw_analog_x is not None:
        out += struct.pack(">B", raw_analog_x)
        if damage is not None:
            out += struct.pack(">f", damage)
    return out


def post_payload(
    *,
    index: int = -123,
    port: int = 0,
    is_follower: bool = False,
    character: int = 18,
    state: int = 14,
    position: tuple[float, float] = (1.5, -2.0),
    direction: float = -1.0,
    damage: float = 12.5,
    shield: float = 60.0,
    last_attack_landed: int = 0,
    combo_count: int = 0,
    last_hit_by: int = 6,
    stocks: int = 4,
    state_age: float | None = None,
    flags: bytes | None = None,
    misc_as: float = 0.0,
    ground: int = 2,
    jumps: int = 1,
    l_cancel: int = 0,
    airborne: bool = False,
    hurtbox_state: int | None = None,
    velocities: tuple[float, float, float, float, float] | None = None,
    hitlag: float | None = None,
    animation_index: int | None = None,
) -> bytes:
    out = struct.pack(
        ">iBBBHfffffBBBB",
        index,
        port,
        1 if is_follower else 0,
        character,
        state,
        position[0],
        position[1],
        direction,
        damage,
        shield,
        last_attack_landed,
        combo_count,
        last_hit_by,
        stocks,
    )
    if state_age is None:
        return out
    out += struct.pack(">f", state_age)
    if flags is None:
        return out
    out += bytes(flags) + struct.pack(">fHBBB", misc_as, ground, jumps, l_cancel, 1 if airborne else 0)
    if hurtbox_state is None:
        return out
    out += struct.pack(">B", hurtbox_state)
    if velocities is None:
        return out
    out += struct.pack(">5f", *velocities)
    if hitlag is None:
        return out
    out += struct.pack(">f", hitlag)
    if animation_index is None:
        return out
    return out + struct.pack(">I", animation_index)


def payload_sizes_record(sizes: Mapping[int, int]) -> bytes:
    body = b"".join(struct.pack(">BH", code, size) for code, size in sizes.items())
    return bytes([0x35, len(body) + 1]) + body


def event(code: int, payload: bytes) -> bytes:
    return bytes([code]) + payload


def raw_stream(sizes: Mapping[int, int], events: Iterable[bytes]) -> bytes:
    return payload_sizes_record(sizes) + b"".join(events)


def ubjson_key(key: str) -> bytes:
    raw = key.encode("utf-8")
    return b"U" + bytes([len(raw)]) + raw


def ubjson_value(value: object) -> bytes:
    if isinstance(value, str):
        raw = value.encode("utf-8")
        return b"SU" + bytes([len(raw)]) + raw
    if isinstance(value, int):
        return b"l" + struct.pack(">i", value)
    if isinstance(value, Mapping):
        return b"{" + ubjson_map_body(value)
    raise TypeError(f"unsupported metadata value: {value!r}")


def ubjson_map_body(mapping: Mapping[str, object]) -> bytes:
    """Map entries plus the closing brace (the opening brace is the caller's)."""
    return b"".join(ubjson_key(k) + ubjson_value(v) for k, v in mapping.items()) + b"}"


def replay(
    raw: bytes,
    metadata: Mapping[str, object] | None = None,
    *,
    raw_len: int | None = None,
) -> bytes:
    declared = len(raw) if raw_len is None else raw_len
    return (
        RAW_PROLOGUE
        + struct.pack(">I", declared)
        + raw
        + METADATA_PROLOGUE
        + ubjson_map_body(metadata or {})
        + b"}"
    )


class RecordingHandlers(Handlers):
    """Collects every callback as `(name, value)` in delivery order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _value in self.calls]

    def values(self, name: str) -> list[Any]:
        return [value for call, value in self.calls if call == name]

    def game_start(self, start: Any) -> None:
        self.calls.append(("game_start", start))

    def game_end(self, end: Any) -> None:
        self.calls.append(("game_end", end))

    def frame_pre(self, event: Any) -> None:
        self.calls.append(("frame_pre", event))

    def frame_post(self, event: Any) -> None:
        self.calls.append(("frame_post", event))

    def metadata(self, metadata: Any) -> None:
        self.calls.append(("metadata", metadata))
