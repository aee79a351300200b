"""
Game start / game end payload decoders.

Game start layout (offsets into the payload, i.e. excluding the event code):

  0x000  u8[3]  Slippi version (major, minor, revision), then u8 build
  0x004  u8     bitfield 1, u8 bitfield 2, u8 ???, u8 bitfield 3
  0x00C  u8     is_teams
  0x00F  i8     item spawn frequency, i8 self-destruct score
  0x012  u16    stage, u32 timer
  0x027  u8[5]  item spawn bitfield
  0x034  f32    damage ratio
  0x064  4 x 36-byte player blocks
  0x13C  u32    random seed
  0x140  4 x 8-byte UCF blocks                 (1.0.0)
  0x160  4 x 16-byte name tags, Shift_JIS      (1.3.0)
  0x1A0  u8     is_pal                         (1.5.0)
  0x1A1  u8     is_frozen_ps                   (2.0.0)
  0x1A2  u8     minor scene, u8 major scene    (3.7.0)
  0x1A4  4 x 31-byte display names, 4 x 10-byte connect codes (3.9.0)
  0x248  4 x 29-byte Slippi uids               (3.11.0)
  0x2BC  u8     language                       (3.12.0)
  0x2BD  51-byte match id, u32 game, u32 tiebreaker (3.14.0)

Each versioned block is present only if the payload has bytes left after the
previous one.
"""

from __future__ import annotations

import io
from typing import Any, Final

from construct import Array, Byte, Bytes, Flag, Float32b, Int8sb, Int16ub, Int32ub, Padding, Struct

from .primitives import decode_fixed_text, extension, optional_enum, parse, payload_stream, remaining, to_enum
from .types import (
    NUM_PORTS,
    DashBack,
    End,
    EndMethod,
    EndV2_0,
    EndV3_13,
    Match,
    Netplay,
    Player,
    PlayerType,
    PlayerV1_0,
    PlayerV1_3,
    Scene,
    ShieldDrop,
    SlippiVersion,
    Start,
    StartV1_5,
    StartV2_0,
    StartV3_7,
    StartV3_9,
    StartV3_11,
    StartV3_12,
    StartV3_14,
    Team,
    TeamColor,
    TeamShade,
    Ucf,
)

# WHATWG Shift_JIS, i.e. with the NEC and IBM extensions.
NAME_TAG_ENCODING: Final[str] = "cp932"
NAME_TAG_SIZE: Final[int] = 16
DISPLAY_NAME_SIZE: Final[int] = 31
CONNECT_CODE_SIZE: Final[int] = 10
SUID_SIZE: Final[int] = 29
MATCH_ID_SIZE: Final[int] = 51

PLAYER_TYPES_WITH_RECORD: Final[frozenset[int]] = frozenset({PlayerType.HUMAN, PlayerType.CPU, PlayerType.DEMO})

_PLAYER_V0 = Struct(
    "character" / Byte,
    "type" / Byte,
    "stocks" / Byte,
    "costume" / Byte,
    Padding(3),
    "team_shade" / Byte,
    "handicap" / Byte,
    "team_color" / Byte,
    Padding(2),
    "bitfield" / Byte,
    Padding(2),
    "cpu_level" / Byte,
    Padding(4),
    "offense_ratio" / Float32b,
    "defense_ratio" / Float32b,
    "model_scale" / Float32b,
    Padding(4),
)

_START_BASE = Struct(
    "major" / Byte,
    "minor" / Byte,
    "revision" / Byte,
    Padding(1),  # build number, unused
    "bitfield_1" / Byte,
    "bitfield_2" / Byte,
    Padding(1),
    "bitfield_3" / Byte,
    Padding(4),
    "is_teams" / Flag,
    Padding(2),
    "item_spawn_frequency" / Int8sb,
    "self_destruct_score" / Int8sb,
    Padding(1),
    "stage" / Int16ub,
    "timer" / Int32ub,
    Padding(15),
    "item_spawn_bitfield" / Bytes(5),
    Padding(8),
    "damage_ratio" / Float32b,
    Padding(44),
    "players" / Array(NUM_PORTS, _PLAYER_V0),
    Padding(72),
    "random_seed" / Int32ub,
)

_PLAYERS_V1_0 = Array(
    NUM_PORTS,
    Struct(
        "dash_back" / Int32ub,
        "shield_drop" / Int32ub,
    ),
)

_PLAYERS_V1_3 = Array(NUM_PORTS, Bytes(NAME_TAG_SIZE))

_START_V1_5 = Struct("is_pal" / Flag)

_START_V2_0 = Struct("is_frozen_ps" / Flag)

_START_V3_7 = Struct(
    "minor" / Byte,
    "major" / Byte,
)

_START_V3_9 = Struct(
    "names" / Array(NUM_PORTS, Bytes(DISPLAY_NAME_SIZE)),
    "codes" / Array(NUM_PORTS, Bytes(CONNECT_CODE_SIZE)),
)

_START_V3_11 = Struct("suids" / Array(NUM_PORTS, Bytes(SUID_SIZE)))

_START_V3_12 = Struct("language" / Byte)

_START_V3_14 = Struct(
    "id" / Bytes(MATCH_ID_SIZE),
    "game" / Int32ub,
    "tiebreaker" / Int32ub,
)

_END_BASE = Struct("method" / Byte)

_END_V2_0 = Struct("lras_initiator" / Int8sb)

_END_V3_13 = Struct("player_placements" / Array(NUM_PORTS, Int8sb))


def _player_v1_3(raw: bytes) -> PlayerV1_3:
    return PlayerV1_3(name_tag=decode_fixed_text(bytes(raw), NAME_TAG_ENCODING))


def _player_v1_0(raw: Any, v1_3: bytes | None) -> PlayerV1_0:
    return PlayerV1_0(
        ucf=Ucf(
            dash_back=optional_enum(DashBack, raw.dash_back),
            shield_drop=optional_enum(ShieldDrop, raw.shield_drop),
        ),
        v1_3=None if v1_3 is None else _player_v1_3(v1_3),
    )


def _player(raw: Any, *, is_teams: bool, v1_0: Any | None, v1_3: bytes | None) -> Player | None:
    if int(raw.type) not in PLAYER_TYPES_WITH_RECORD:
        return None
    player_type = PlayerType(int(raw.type))

    team = None
    if is_teams:
        team = Team(
            color=to_enum(TeamColor, raw.team_color),
            shade=to_enum(TeamShade, raw.team_shade),
        )

    return Player(
        character=int(raw.character),
        type=player_type,
        stocks=int(raw.stocks),
        costume=int(raw.costume),
        team=team,
        handicap=int(raw.handicap),
        bitfield=int(raw.bitfield),
        cpu_level=int(raw.cpu_level) if player_type == PlayerType.CPU else None,
        offense_ratio=float(raw.offense_ratio),
        defense_ratio=float(raw.defense_ratio),
        model_scale=float(raw.model_scale),
        v1_0=None if v1_0 is None else _player_v1_0(v1_0, v1_3),
    )


def _start_v3_14(r: io.BytesIO) -> StartV3_14:
    raw = parse(r, _START_V3_14)
    return StartV3_14(
        match=Match(
            id=decode_fixed_text(bytes(raw.id), "utf-8"),
            game=int(raw.game),
            tiebreaker=int(raw.tiebreaker),
        ),
    )


def _start_v3_12(r: io.BytesIO) -> StartV3_12:
    raw = parse(r, _START_V3_12)
    return StartV3_12(
        language=int(raw.language),
        v3_14=extension(r, _start_v3_14),
    )


def _start_v3_11(r: io.BytesIO) -> StartV3_11:
    raw = parse(r, _START_V3_11)
    return StartV3_11(
        suids=tuple(decode_fixed_text(bytes(suid), "utf-8") for suid in raw.suids),
        v3_12=extension(r, _start_v3_12),
    )


def _start_v3_9(r: io.BytesIO) -> StartV3_9:
    raw = parse(r, _START_V3_9)
    return StartV3_9(
        netplay=tuple(
            Netplay(
                name=decode_fixed_text(bytes(name), NAME_TAG_ENCODING),
                code=decode_fixed_text(bytes(code), NAME_TAG_ENCODING),
            )
            for name, code in zip(raw.names, raw.codes)
        ),
        v3_11=extension(r, _start_v3_11),
    )


def _start_v3_7(r: io.BytesIO) -> StartV3_7:
    raw = parse(r, _START_V3_7)
    return StartV3_7(
        scene=Scene(minor=int(raw.minor), major=int(raw.major)),
        v3_9=extension(r, _start_v3_9),
    )


def _start_v2_0(r: io.BytesIO) -> StartV2_0:
    raw = parse(r, _START_V2_0)
    return StartV2_0(
        is_frozen_ps=bool(raw.is_frozen_ps),
        v3_7=extension(r, _start_v3_7),
    )


def _start_v1_5(r: io.BytesIO) -> StartV1_5:
    raw = parse(r, _START_V1_5)
    return StartV1_5(
        is_pal=bool(raw.is_pal),
        v2_0=extension(r, _start_v2_0),
    )


def game_start(payload: bytes) -> Start:
    r = payload_stream(payload)
    base = parse(r, _START_BASE)
    is_teams = bool(base.is_teams)

    players_v1_0 = parse(r, _PLAYERS_V1_0) if remaining(r) > 0 else None
    players_v1_3 = parse(r, _PLAYERS_V1_3) if players_v1_0 is not None and remaining(r) > 0 else None

    players = tuple(
        _player(
            base.players[port],
            is_teams=is_teams,
            v1_0=None if players_v1_0 is None else players_v1_0[port],
            v1_3=None if players_v1_3 is None else players_v1_3[port],
        )
        for port in range(NUM_PORTS)
    )

    return Start(
        slippi=SlippiVersion(int(base.major), int(base.minor), int(base.revision)),
        bitfield=bytes((base.bitfield_1, base.bitfield_2, base.bitfield_3)),
        is_teams=is_teams,
        item_spawn_frequency=int(base.item_spawn_frequency),
        self_destruct_score=int(base.self_destruct_score),
        stage=int(base.stage),
        timer=int(base.timer),
        item_spawn_bitfield=bytes(base.item_spawn_bitfield),
        damage_ratio=float(base.damage_ratio),
        players=players,
        random_seed=int(base.random_seed),
        v1_5=None if players_v1_3 is None else extension(r, _start_v1_5),
    )


def _end_v3_13(r: io.BytesIO) -> EndV3_13:
    raw = parse(r, _END_V3_13)
    return EndV3_13(player_placements=tuple(int(p) for p in raw.player_placements))


def _end_v2_0(r: io.BytesIO) -> EndV2_0:
    raw = parse(r, _END_V2_0)
    return EndV2_0(
        lras_initiator=int(raw.lras_initiator),
        v3_13=extension(r, _end_v3_13),
    )


def game_end(payload: bytes) -> End:
    r = payload_stream(payload)
    raw = parse(r, _END_BASE)
    return End(
        method=to_enum(EndMethod, raw.method),
        v2_0=extension(r, _end_v2_0),
    )


__all__ = [
    "NAME_TAG_ENCODING",
    "game_end",
    "game_start",
]
