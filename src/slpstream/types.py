from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Final, Generic, TypeVar

NUM_PORTS: Final[int] = 4
FIRST_FRAME_INDEX: Final[int] = -123

PAYLOADS_EVENT_CODE: Final[int] = 0x35

# Raw action-state codes below this are shared by every character.
CHARACTER_SPECIFIC_STATE_START: Final[int] = 341


class EventKind(IntEnum):
    GAME_START = 0x36
    FRAME_PRE = 0x37
    FRAME_POST = 0x38
    GAME_END = 0x39


class Internal:
    """Internal character ids the decoder itself has to know about."""

    SHEIK = 7
    ZELDA = 19


class Common:
    WAIT = 14


class Zelda:
    TRANSFORM_GROUND = 353
    TRANSFORM_GROUND_ENDING = 354
    TRANSFORM_AIR = 355
    TRANSFORM_AIR_ENDING = 356


class Sheik:
    TRANSFORM_GROUND = 359
    TRANSFORM_GROUND_ENDING = 360
    TRANSFORM_AIR = 361
    TRANSFORM_AIR_ENDING = 362


class Direction(IntEnum):
    LEFT = 0
    RIGHT = 1


class PlayerType(IntEnum):
    HUMAN = 0
    CPU = 1
    DEMO = 2
    NONE = 3


class OpenIntEnum(IntEnum):
    """`IntEnum` that keeps wire values it has no name for.

    Newer producers add codes; an unnamed value decodes to a pseudo-member called
    `UNKNOWN_<value>` that compares equal to the raw int.
    """

    @classmethod
    def _missing_(cls, value: object) -> OpenIntEnum | None:
        if not isinstance(value, int) or isinstance(value, bool):
            return None
        member = int.__new__(cls, value)
        member._name_ = f"UNKNOWN_{value}"
        member._value_ = value
        return member

    @property
    def is_known(self) -> bool:
        return self._name_ in type(self).__members__


class TeamColor(OpenIntEnum):
    RED = 0
    BLUE = 1
    GREEN = 2


class TeamShade(OpenIntEnum):
    NORMAL = 0
    LIGHT = 1
    DARK = 2


class DashBack(OpenIntEnum):
    UCF = 1
    ARDUINO = 2


class ShieldDrop(OpenIntEnum):
    UCF = 1
    ARDUINO = 2


class EndMethod(OpenIntEnum):
    UNRESOLVED = 0
    TIME = 1
    GAME = 2
    RESOLVED = 3
    NO_CONTEST = 7


class LCancel(OpenIntEnum):
    SUCCESSFUL = 1
    UNSUCCESSFUL = 2


class HurtboxState(OpenIntEnum):
    VULNERABLE = 0
    INVULNERABLE = 1
    INTANGIBLE = 2


class StateFlags(IntFlag):
    REFLECT = 1 << 4
    UNTOUCHABLE = 1 << 10
    FAST_FALL = 1 << 11
    HIT_LAG = 1 << 13
    SHIELD = 1 << 23
    HIT_STUN = 1 << 25
    SHIELD_TOUCH = 1 << 26
    POWER_SHIELD = 1 << 29
    FOLLOWER = 1 << 35
    SLEEP = 1 << 36
    DEAD = 1 << 38
    OFF_SCREEN = 1 << 39


@dataclass(frozen=True, slots=True)
class FrameId:
    index: int
    port: int
    is_follower: bool


@dataclass(frozen=True, slots=True)
class ActionState:
    """Action-state code interpreted against a character.

    `character` is `None` for common states; for character-specific states it is
    the internal character id the code was interpreted with.
    """

    value: int
    character: int | None = None

    @classmethod
    def from_raw(cls, value: int, character: int) -> ActionState:
        if int(value) < CHARACTER_SPECIFIC_STATE_START:
            return cls(int(value), None)
        return cls(int(value), int(character))

    @property
    def is_common(self) -> bool:
        return self.character is None


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Velocities:
    self_induced_air_x: float
    self_induced_y: float
    knockback_x: float
    knockback_y: float
    self_induced_ground_x: float


@dataclass(frozen=True, slots=True)
class Buttons:
    logical: int
    physical: int


@dataclass(frozen=True, slots=True)
class TriggersPhysical:
    l: float  # noqa: E741
    r: float


@dataclass(frozen=True, slots=True)
class Triggers:
    logical: float
    physical: TriggersPhysical


# Game start / end.


@dataclass(frozen=True, slots=True, order=True)
class SlippiVersion:
    major: int
    minor: int
    revision: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


@dataclass(frozen=True, slots=True)
class Team:
    color: TeamColor
    shade: TeamShade


@dataclass(frozen=True, slots=True)
class Ucf:
    dash_back: DashBack | None
    shield_drop: ShieldDrop | None


@dataclass(frozen=True, slots=True)
class PlayerV1_3:
    name_tag: str


@dataclass(frozen=True, slots=True)
class PlayerV1_0:
    ucf: Ucf
    v1_3: PlayerV1_3 | None = None


@dataclass(frozen=True, slots=True)
class Player:
    character: int
    type: PlayerType
    stocks: int
    costume: int
    team: Team | None
    handicap: int
    bitfield: int
    cpu_level: int | None
    offense_ratio: float
    defense_ratio: float
    model_scale: float
    v1_0: PlayerV1_0 | None = None


@dataclass(frozen=True, slots=True)
class Scene:
    minor: int
    major: int


@dataclass(frozen=True, slots=True)
class Netplay:
    name: str
    code: str


@dataclass(frozen=True, slots=True)
class Match:
    id: str
    game: int
    tiebreaker: int


@dataclass(frozen=True, slots=True)
class StartV3_14:
    match: Match


@dataclass(frozen=True, slots=True)
class StartV3_12:
    language: int
    v3_14: StartV3_14 | None = None


@dataclass(frozen=True, slots=True)
class StartV3_11:
    suids: tuple[str, ...]
    v3_12: StartV3_12 | None = None


@dataclass(frozen=True, slots=True)
class StartV3_9:
    netplay: tuple[Netplay, ...]
    v3_11: StartV3_11 | None = None


@dataclass(frozen=True, slots=True)
class StartV3_7:
    scene: Scene
    v3_9: StartV3_9 | None = None


@dataclass(frozen=True, slots=True)
class StartV2_0:
    is_frozen_ps: bool
    v3_7: StartV3_7 | None = None


@dataclass(frozen=True, slots=True)
class StartV1_5:
    is_pal: bool
    v2_0: StartV2_0 | None = None


@dataclass(frozen=True, slots=True)
class Start:
    slippi: SlippiVersion
    bitfield: bytes
    is_teams: bool
    item_spawn_frequency: int
    self_destruct_score: int
    stage: int
    timer: int
    item_spawn_bitfield: bytes
    damage_ratio: float
    players: tuple[Player | None, ...]
    random_seed: int
    v1_5: StartV1_5 | None = None


@dataclass(frozen=True, slots=True)
class EndV3_13:
    player_placements: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class EndV2_0:
    lras_initiator: int
    v3_13: EndV3_13 | None = None


@dataclass(frozen=True, slots=True)
class End:
    method: EndMethod
    v2_0: EndV2_0 | None = None


# Frames.


@dataclass(frozen=True, slots=True)
class PreV1_4:
    damage: float


@dataclass(frozen=True, slots=True)
class PreV1_2:
    raw_analog_x: int
    v1_4: PreV1_4 | None = None


@dataclass(frozen=True, slots=True)
class Pre:
    index: int
    random_seed: int
    state: ActionState
    position: Position
    direction: Direction
    joystick: Position
    cstick: Position
    triggers: Triggers
    buttons: Buttons
    v1_2: PreV1_2 | None = None

    def array_index(self) -> int:
        """0-based frame index (in-game frame indexes start at `FIRST_FRAME_INDEX`)."""
        return self.index - FIRST_FRAME_INDEX


@dataclass(frozen=True, slots=True)
class PostV3_11:
    animation_index: int


@dataclass(frozen=True, slots=True)
class PostV3_8:
    hitlag: float
    v3_11: PostV3_11 | None = None


@dataclass(frozen=True, slots=True)
class PostV3_5:
    velocities: Velocities
    v3_8: PostV3_8 | None = None


@dataclass(frozen=True, slots=True)
class PostV2_1:
    hurtbox_state: HurtboxState
    v3_5: PostV3_5 | None = None


@dataclass(frozen=True, slots=True)
class PostV2_0:
    flags: StateFlags
    misc_as: float
    ground: int
    jumps: int
    l_cancel: LCancel | None
    airborne: bool
    v2_1: PostV2_1 | None = None


@dataclass(frozen=True, slots=True)
class PostV0_2:
    state_age: float
    v2_0: PostV2_0 | None = None


@dataclass(frozen=True, slots=True)
class Post:
    index: int
    character: int
    state: ActionState
    position: Position
    direction: Direction
    damage: float
    shield: float
    last_attack_landed: int | None
    combo_count: int
    last_hit_by: int
    stocks: int
    v0_2: PostV0_2 | None = None

    def array_index(self) -> int:
        return self.index - FIRST_FRAME_INDEX


F = TypeVar("F", Pre, Post)


@dataclass(frozen=True, slots=True)
class FrameEvent(Generic[F]):
    id: FrameId
    event: F


__all__ = [
    "CHARACTER_SPECIFIC_STATE_START",
    "FIRST_FRAME_INDEX",
    "NUM_PORTS",
    "OpenIntEnum",
    "PAYLOADS_EVENT_CODE",
    "ActionState",
    "Buttons",
    "Common",
    "DashBack",
    "Direction",
    "End",
    "EndMethod",
    "EndV2_0",
    "EndV3_13",
    "EventKind",
    "FrameEvent",
    "FrameId",
    "HurtboxState",
    "Internal",
    "LCancel",
    "Match",
    "Netplay",
    "Player",
    "PlayerType",
    "PlayerV1_0",
    "PlayerV1_3",
    "Position",
    "Post",
    "PostV0_2",
    "PostV2_0",
    "PostV2_1",
    "PostV3_5",
    "PostV3_8",
    "PostV3_11",
    "Pre",
    "PreV1_2",
    "PreV1_4",
    "Scene",
    "Sheik",
    "ShieldDrop",
    "SlippiVersion",
    "Start",
    "StartV1_5",
    "StartV2_0",
    "StartV3_7",
    "StartV3_9",
    "StartV3_11",
    "StartV3_12",
    "StartV3_14",
    "StateFlags",
    "Team",
    "TeamColor",
    "TeamShade",
    "Triggers",
    "TriggersPhysical",
    "Ucf",
    "Velocities",
    "Zelda",
]
