from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("slpstream")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .envelope import parse, parse_bytes
from .errors import (
    ByteAccountingMismatch,
    InvalidDiscriminant,
    InvalidText,
    MalformedEnvelope,
    MalformedMetadata,
    ParseError,
    TruncatedInput,
    UnknownEventSize,
    UnsupportedValueType,
)
from .handlers import Handlers
from .metadata import Metadata, convert as convert_metadata
from .options import ParseOptions
from .types import (
    FIRST_FRAME_INDEX,
    NUM_PORTS,
    ActionState,
    Direction,
    End,
    EventKind,
    FrameEvent,
    FrameId,
    Player,
    Post,
    Pre,
    Start,
)
from .ubjson import Object

__all__ = [
    "FIRST_FRAME_INDEX",
    "NUM_PORTS",
    "ActionState",
    "ByteAccountingMismatch",
    "Direction",
    "End",
    "EventKind",
    "FrameEvent",
    "FrameId",
    "Handlers",
    "InvalidDiscriminant",
    "InvalidText",
    "MalformedEnvelope",
    "MalformedMetadata",
    "Metadata",
    "Object",
    "ParseError",
    "ParseOptions",
    "Player",
    "Post",
    "Pre",
    "Start",
    "TruncatedInput",
    "UnknownEventSize",
    "UnsupportedValueType",
    "__version__",
    "convert_metadata",
    "parse",
    "parse_bytes",
]
