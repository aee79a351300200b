"""
Raw event stream: the payload-size table followed by length-prefixed events.

Every record is one code byte followed by exactly the payload size negotiated for
that code in the leading table, which lets us skip event types we don't know.
"""

from __future__ import annotations

import logging
from typing import Final, TypeAlias

from .errors import ByteAccountingMismatch, MalformedEnvelope, ParseError, UnknownEventSize
from .frame import frame_post, frame_pre
from .game import game_end, game_start
from .handlers import Handlers
from .options import DEFAULT_OPTIONS, ParseOptions
from .prediction import CharStates
from .primitives import Reader, read_bytes, read_u8, read_u16, tell
from .types import PAYLOADS_EVENT_CODE, EventKind

logger = logging.getLogger(__name__)

PayloadSizeTable: TypeAlias = dict[int, int]

PAYLOAD_SIZE_ENTRY_SIZE: Final[int] = 3

_KINDS: Final[dict[int, EventKind]] = {int(kind): kind for kind in EventKind}


def read_payload_sizes(reader: Reader) -> tuple[int, PayloadSizeTable]:
    """Read the Event Payloads record, which must come first in the raw stream.

    Returns the number of bytes consumed plus a map of raw event codes to payload
    sizes. Keys are raw codes rather than `EventKind`s so that unknown events can be
    skipped.
    """

    code = read_u8(reader)
    if code != PAYLOADS_EVENT_CODE:
        raise MalformedEnvelope(f"expected event payloads ({PAYLOADS_EVENT_CODE:#x}), got {code:#x}")

    # The size counts itself, so it's one more than a multiple of the entry size.
    size = read_u8(reader)
    if size % PAYLOAD_SIZE_ENTRY_SIZE != 1:
        raise MalformedEnvelope(f"invalid event payloads size: {size}")

    sizes: PayloadSizeTable = {}
    for _ in range((size - 1) // PAYLOAD_SIZE_ENTRY_SIZE):
        event_code = read_u8(reader)
        sizes[event_code] = read_u16(reader)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("event payload sizes: %s", {f"{k:#x}": v for k, v in sizes.items()})
    return 1 + size, sizes


def _decode(kind: EventKind, payload: bytes, char_states: CharStates, options: ParseOptions) -> object | None:
    if kind is EventKind.GAME_START:
        return game_start(payload)
    if kind is EventKind.GAME_END:
        return game_end(payload)
    if options.skip_frames:
        return None
    if kind is EventKind.FRAME_PRE:
        return frame_pre(payload, char_states)
    return frame_post(payload, char_states)


def _deliver(kind: EventKind, record: object, handlers: Handlers) -> None:
    if kind is EventKind.GAME_START:
        handlers.game_start(record)  # type: ignore[arg-type]
    elif kind is EventKind.GAME_END:
        handlers.game_end(record)  # type: ignore[arg-type]
    elif kind is EventKind.FRAME_PRE:
        handlers.frame_pre(record)  # type: ignore[arg-type]
    else:
        handlers.frame_post(record)  # type: ignore[arg-type]


def read_event(
    reader: Reader,
    sizes: PayloadSizeTable,
    char_states: CharStates,
    handlers: Handlers,
    options: ParseOptions = DEFAULT_OPTIONS,
    *,
    index: int | None = None,
) -> tuple[int, EventKind | None]:
    """Read one event and hand it to `handlers` if it's a kind we decode.

    Returns the number of bytes consumed (code byte included) and the event kind,
    or `None` for codes we skipped.
    """

    try:
        code = read_u8(reader)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("event %#x", code)
        size = sizes.get(code)
        if size is None:
            raise UnknownEventSize(f"unknown event: {code:#x}")
        payload = read_bytes(reader, size)
        kind = _KINDS.get(code)
        record = None if kind is None else _decode(kind, payload, char_states, options)
    except ParseError as exc:
        if exc.event_index is None:
            exc.event_index = index
        if exc.offset is None:
            exc.offset = tell(reader)
        raise

    if kind is not None and record is not None:
        _deliver(kind, record, handlers)
    return 1 + size, kind


def parse_raw(
    reader: Reader,
    raw_len: int,
    handlers: Handlers,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> int:
    """Consume the raw event stream and return the number of bytes read.

    `raw_len` is the declared length of the stream, or 0 when it isn't known (a
    replay that's still being recorded); in that case the stream ends at the first
    game-end event.
    """

    try:
        bytes_read, sizes = read_payload_sizes(reader)
    except ParseError as exc:
        if exc.offset is None:
            exc.offset = tell(reader)
        raise
    char_states = CharStates()
    last_event: EventKind | None = None
    index = 0

    while (raw_len == 0 or bytes_read < raw_len) and last_event is not EventKind.GAME_END:
        consumed, last_event = read_event(reader, sizes, char_states, handlers, options, index=index)
        bytes_read += consumed
        index += 1

    if raw_len != 0 and bytes_read != raw_len:
        raise ByteAccountingMismatch(
            f"failed to consume expected number of bytes: expected {raw_len}, read {bytes_read}",
            offset=tell(reader),
        )

    logger.debug("raw stream: %d events, %d bytes", index, bytes_read)
    return bytes_read


__all__ = [
    "PAYLOAD_SIZE_ENTRY_SIZE",
    "PayloadSizeTable",
    "parse_raw",
    "read_event",
    "read_payload_sizes",
]
