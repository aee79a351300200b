from __future__ import annotations

import io

from construct import Byte, Bytes, Flag, Float32b, Int16ub, Int32sb, Int32ub, Struct

from .errors import InvalidDiscriminant
from .prediction import CharStates
from .primitives import extension, optional_enum, parse, payload_stream, to_enum
from .types import (
    ActionState,
    Buttons,
    Direction,
    FrameEvent,
    FrameId,
    HurtboxState,
    LCancel,
    Position,
    Post,
    PostV0_2,
    PostV2_0,
    PostV2_1,
    PostV3_5,
    PostV3_8,
    PostV3_11,
    Pre,
    PreV1_2,
    PreV1_4,
    StateFlags,
    Triggers,
    TriggersPhysical,
    Velocities,
)

STATE_FLAGS_SIZE = 5

_FRAME_ID = Struct(
    "index" / Int32sb,
    "port" / Byte,
    "is_follower" / Flag,
)

_PRE_BASE = Struct(
    "random_seed" / Int32ub,
    "state" / Int16ub,
    "position_x" / Float32b,
    "position_y" / Float32b,
    "direction" / Float32b,
    "joystick_x" / Float32b,
    "joystick_y" / Float32b,
    "cstick_x" / Float32b,
    "cstick_y" / Float32b,
    "trigger_logical" / Float32b,
    "buttons_logical" / Int32ub,
    "buttons_physical" / Int16ub,
    "trigger_l" / Float32b,
    "trigger_r" / Float32b,
)

_PRE_V1_2 = Struct("raw_analog_x" / Byte)

_PRE_V1_4 = Struct("damage" / Float32b)

_POST_BASE = Struct(
    "character" / Byte,
    "state" / Int16ub,
    "position_x" / Float32b,
    "position_y" / Float32b,
    "direction" / Float32b,
    "damage" / Float32b,
    "shield" / Float32b,
    "last_attack_landed" / Byte,
    "combo_count" / Byte,
    "last_hit_by" / Byte,
    "stocks" / Byte,
)

_POST_V0_2 = Struct("state_age" / Float32b)

_POST_V2_0 = Struct(
    "flags" / Bytes(STATE_FLAGS_SIZE),
    "misc_as" / Float32b,
    "ground" / Int16ub,
    "jumps" / Byte,
    "l_cancel" / Byte,
    "airborne" / Flag,
)

_POST_V2_1 = Struct("hurtbox_state" / Byte)

_POST_V3_5 = Struct(
    "self_induced_air_x" / Float32b,
    "self_induced_y" / Float32b,
    "knockback_x" / Float32b,
    "knockback_y" / Float32b,
    "self_induced_ground_x" / Float32b,
)

_POST_V3_8 = Struct("hitlag" / Float32b)

_POST_V3_11 = Struct("animation_index" / Int32ub)


def direction(value: float) -> Direction:
    value = float(value)
    if value < 0.0:
        return Direction.LEFT
    if value > 0.0:
        return Direction.RIGHT
    raise InvalidDiscriminant(f"invalid direction: {value!r}")


def pack_state_flags(raw: bytes) -> StateFlags:
    """Pack the five flag bytes into one word, first byte in the low bits."""
    value = 0
    for shift, byte in enumerate(bytes(raw)):
        value |= int(byte) << (8 * shift)
    return StateFlags(value)


def _frame_id(r: io.BytesIO) -> FrameId:
    raw = parse(r, _FRAME_ID)
    return FrameId(index=int(raw.index), port=int(raw.port), is_follower=bool(raw.is_follower))


def _pre_v1_4(r: io.BytesIO) -> PreV1_4:
    raw = parse(r, _PRE_V1_4)
    return PreV1_4(damage=float(raw.damage))


def _pre_v1_2(r: io.BytesIO) -> PreV1_2:
    raw = parse(r, _PRE_V1_2)
    return PreV1_2(
        raw_analog_x=int(raw.raw_analog_x),
        v1_4=extension(r, _pre_v1_4),
    )


def frame_pre(payload: bytes, char_states: CharStates) -> FrameEvent[Pre]:
    r = payload_stream(payload)
    frame_id = _frame_id(r)

    # The action state can only be interpreted once we know the character, but a
    # Zelda/Sheik transformation isn't confirmed until this frame's post event.
    character = char_states.predict(frame_id)

    raw = parse(r, _PRE_BASE)
    pre = Pre(
        index=frame_id.index,
        random_seed=int(raw.random_seed),
        state=ActionState.from_raw(raw.state, character),
        position=Position(float(raw.position_x), float(raw.position_y)),
        direction=direction(raw.direction),
        joystick=Position(float(raw.joystick_x), float(raw.joystick_y)),
        cstick=Position(float(raw.cstick_x), float(raw.cstick_y)),
        triggers=Triggers(
            logical=float(raw.trigger_logical),
            physical=TriggersPhysical(l=float(raw.trigger_l), r=float(raw.trigger_r)),
        ),
        buttons=Buttons(logical=int(raw.buttons_logical), physical=int(raw.buttons_physical)),
        v1_2=extension(r, _pre_v1_2),
    )
    return FrameEvent(id=frame_id, event=pre)


def _post_v3_11(r: io.BytesIO) -> PostV3_11:
    raw = parse(r, _POST_V3_11)
    return PostV3_11(animation_index=int(raw.animation_index))


def _post_v3_8(r: io.BytesIO) -> PostV3_8:
    raw = parse(r, _POST_V3_8)
    return PostV3_8(
        hitlag=float(raw.hitlag),
        v3_11=extension(r, _post_v3_11),
    )


def _post_v3_5(r: io.BytesIO) -> PostV3_5:
    raw = parse(r, _POST_V3_5)
    return PostV3_5(
        velocities=Velocities(
            self_induced_air_x=float(raw.self_induced_air_x),
            self_induced_y=float(raw.self_induced_y),
            knockback_x=float(raw.knockback_x),
            knockback_y=float(raw.knockback_y),
            self_induced_ground_x=float(raw.self_induced_ground_x),
        ),
        v3_8=extension(r, _post_v3_8),
    )


def _post_v2_1(r: io.BytesIO) -> PostV2_1:
    raw = parse(r, _POST_V2_1)
    return PostV2_1(
        hurtbox_state=to_enum(HurtboxState, raw.hurtbox_state),
        v3_5=extension(r, _post_v3_5),
    )


def _post_v2_0(r: io.BytesIO) -> PostV2_0:
    raw = parse(r, _POST_V2_0)
    return PostV2_0(
        flags=pack_state_flags(raw.flags),
        misc_as=float(raw.misc_as),
        ground=int(raw.ground),
        jumps=int(raw.jumps),
        l_cancel=optional_enum(LCancel, raw.l_cancel),
        airborne=bool(raw.airborne),
        v2_1=extension(r, _post_v2_1),
    )


def _post_v0_2(r: io.BytesIO) -> PostV0_2:
    raw = parse(r, _POST_V0_2)
    return PostV0_2(
        state_age=float(raw.state_age),
        v2_0=extension(r, _post_v2_0),
    )


def frame_post(payload: bytes, char_states: CharStates) -> FrameEvent[Post]:
    r = payload_stream(payload)
    frame_id = _frame_id(r)

    raw = parse(r, _POST_BASE)
    character = int(raw.character)
    state = ActionState.from_raw(raw.state, character)
    post = Post(
        index=frame_id.index,
        character=character,
        state=state,
        position=Position(float(raw.position_x), float(raw.position_y)),
        direction=direction(raw.direction),
        damage=float(raw.damage),
        shield=float(raw.shield),
        last_attack_landed=int(raw.last_attack_landed) or None,
        combo_count=int(raw.combo_count),
        last_hit_by=int(raw.last_hit_by),
        stocks=int(raw.stocks),
        v0_2=extension(r, _post_v0_2),
    )

    char_states.update(frame_id, character, state)
    return FrameEvent(id=frame_id, event=post)


__all__ = [
    "direction",
    "frame_post",
    "frame_pre",
    "pack_state_flags",
]
