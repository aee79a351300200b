from __future__ import annotations

from .types import End, FrameEvent, Post, Pre, Start
from .ubjson import Object


class Handlers:
    """Event sink for `parse`.

    Every callback defaults to a no-op; subclasses override the ones they need.
    Callbacks run synchronously in stream order. Raising from a callback aborts
    the parse and the exception propagates to the caller unchanged.
    """

    def game_start(self, start: Start) -> None:
        pass

    def game_end(self, end: End) -> None:
        pass

    def frame_pre(self, event: FrameEvent[Pre]) -> None:
        pass

    def frame_post(self, event: FrameEvent[Post]) -> None:
        pass

    def metadata(self, metadata: dict[str, Object]) -> None:
        pass


__all__ = ["Handlers"]
