from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

ENV_SKIP_FRAMES: Final[str] = "SLPSTREAM_SKIP_FRAMES"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"", "0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Knobs for a single `parse` call.

    `skip_frames`: frame-pre/frame-post payloads are still read (and counted towards
    the raw length) but not decoded, and no frame callbacks are made. Useful when
    only the game start/end and metadata are wanted.
    """

    skip_frames: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ParseOptions:
        env = os.environ if environ is None else environ
        return cls(skip_frames=_parse_bool(ENV_SKIP_FRAMES, env.get(ENV_SKIP_FRAMES, "")))


DEFAULT_OPTIONS: Final[ParseOptions] = ParseOptions()


__all__ = ["DEFAULT_OPTIONS", "ENV_SKIP_FRAMES", "ParseOptions"]
