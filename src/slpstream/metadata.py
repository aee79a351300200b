"""
Typed view over the decoded metadata map.

The decoder hands sinks the raw UBJSON tree; `convert` validates the well-known
keys the Slippi producers write and exposes them as structs. Unknown keys are
ignored so newer producers keep working.
"""

from __future__ import annotations

from collections.abc import Mapping

import msgspec

from .errors import MalformedMetadata
from .ubjson import Object


class PlayerNames(msgspec.Struct):
    netplay: str | None = None
    code: str | None = None


class PlayerMetadata(msgspec.Struct):
    names: PlayerNames | None = None
    # internal character id (as a decimal string) -> frames played as that character
    characters: dict[str, int] = msgspec.field(default_factory=dict)


class Metadata(msgspec.Struct, rename="camel"):
    start_at: str | None = None
    last_frame: int | None = None
    played_on: str | None = None
    console_nick: str | None = None
    # keyed by port, as a decimal string
    players: dict[str, PlayerMetadata] = msgspec.field(default_factory=dict)

    def player(self, port: int) -> PlayerMetadata | None:
        return self.players.get(str(int(port)))


def convert(tree: Mapping[str, Object]) -> Metadata:
    try:
        return msgspec.convert(dict(tree), type=Metadata)
    except msgspec.ValidationError as exc:
        raise MalformedMetadata(f"unexpected metadata shape: {exc}") from exc


__all__ = ["Metadata", "PlayerMetadata", "PlayerNames", "convert"]
