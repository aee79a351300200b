from __future__ import annotations


class ParseError(ValueError):
    """Base class for everything that can go wrong while decoding a replay.

    `offset` is the byte offset into the source reached when the error escaped
    `parse`, and `event_index` is the 0-based index of the event being decoded
    (the payload-size table is not counted). Either may be `None` when unknown.
    """

    def __init__(self, message: str, *, offset: int | None = None, event_index: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset
        self.event_index = event_index

    def __str__(self) -> str:
        text = super().__str__()
        where: list[str] = []
        if self.event_index is not None:
            where.append(f"event {self.event_index}")
        if self.offset is not None:
            where.append(f"offset {self.offset:#x}")
        if where:
            text += f" ({', '.join(where)})"
        return text


class MalformedEnvelope(ParseError):
    pass


class UnknownEventSize(ParseError):
    pass


class ByteAccountingMismatch(ParseError):
    pass


class TruncatedInput(ParseError):
    pass


class InvalidDiscriminant(ParseError):
    pass


class InvalidText(ParseError):
    pass


class MalformedMetadata(ParseError):
    pass


class UnsupportedValueType(ParseError):
    pass


__all__ = [
    "ByteAccountingMismatch",
    "InvalidDiscriminant",
    "InvalidText",
    "MalformedEnvelope",
    "MalformedMetadata",
    "ParseError",
    "TruncatedInput",
    "UnknownEventSize",
    "UnsupportedValueType",
]
