"""
Per-slot character prediction for frame-pre decoding.

A pre-frame event carries an action-state code whose meaning depends on the
character in the slot, but Zelda <-> Sheik transformations only become visible
in the *post*-frame event that follows it. We therefore predict the character
from the previous frame's post event: if that frame was the last frame of the
transform animation, the character has swapped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .errors import InvalidDiscriminant
from .types import NUM_PORTS, ActionState, Common, FrameId, Internal, Sheik, Zelda

ZELDA_TRANSFORM_FRAME: Final[int] = 43
SHEIK_TRANSFORM_FRAME: Final[int] = 36

_TRANSFORMS: Final[dict[int, tuple[ActionState, ActionState, int, int]]] = {
    Internal.ZELDA: (
        ActionState(Zelda.TRANSFORM_GROUND, Internal.ZELDA),
        ActionState(Zelda.TRANSFORM_AIR, Internal.ZELDA),
        ZELDA_TRANSFORM_FRAME,
        Internal.SHEIK,
    ),
    Internal.SHEIK: (
        ActionState(Sheik.TRANSFORM_GROUND, Internal.SHEIK),
        ActionState(Sheik.TRANSFORM_AIR, Internal.SHEIK),
        SHEIK_TRANSFORM_FRAME,
        Internal.ZELDA,
    ),
}


@dataclass(frozen=True, slots=True)
class CharState:
    character: int
    state: ActionState
    age: int = 0


# Transformations can't happen on the first frame, so the initial character is arbitrary.
DEFAULT_CHAR_STATE: Final[CharState] = CharState(
    character=255,
    state=ActionState(Common.WAIT, None),
    age=0,
)


def slot_index(frame_id: FrameId) -> int:
    port = int(frame_id.port)
    if not (0 <= port < NUM_PORTS):
        raise InvalidDiscriminant(f"invalid port: {port}")
    return port * 2 + (1 if frame_id.is_follower else 0)


def predict_character(prev: CharState) -> int:
    transform = _TRANSFORMS.get(prev.state.character) if prev.state.character is not None else None
    if transform is not None:
        ground, air, threshold, other = transform
        if prev.state in (ground, air) and prev.age >= threshold:
            return other
    return prev.character


def next_char_state(prev: CharState, character: int, state: ActionState) -> CharState:
    if character == prev.character and state == prev.state:
        return CharState(character, state, prev.age + 1)

    transform = _TRANSFORMS.get(state.character) if state.character is not None else None
    if transform is not None:
        ground, air, threshold, _other = transform
        # Ground and air transform states flow into each other without restarting the
        # animation. Landing on the frame that would have gone to TRANSFORM_AIR_ENDING
        # instead spends one frame in TRANSFORM_GROUND, delaying the swap by a frame,
        # so the age is capped below the threshold.
        if (state, prev.state) in ((ground, air), (air, ground)):
            return CharState(character, state, min(threshold - 1, prev.age + 1))

    return CharState(character, state, 0)


@dataclass(slots=True)
class CharStates:
    """Last confirmed `CharState` for every slot (port x leader/follower)."""

    _slots: list[CharState] = field(default_factory=lambda: [DEFAULT_CHAR_STATE] * (NUM_PORTS * 2))

    def __getitem__(self, frame_id: FrameId) -> CharState:
        return self._slots[slot_index(frame_id)]

    def predict(self, frame_id: FrameId) -> int:
        return predict_character(self[frame_id])

    def update(self, frame_id: FrameId, character: int, state: ActionState) -> CharState:
        idx = slot_index(frame_id)
        current = next_char_state(self._slots[idx], int(character), state)
        self._slots[idx] = current
        return current


__all__ = [
    "DEFAULT_CHAR_STATE",
    "SHEIK_TRANSFORM_FRAME",
    "ZELDA_TRANSFORM_FRAME",
    "CharState",
    "CharStates",
    "next_char_state",
    "predict_character",
    "slot_index",
]
