"""In-memory drawing sink that records every primitive it receives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DrawCall:
    """One recorded draw primitive."""
    op: str
    args: tuple[Any, ...] = field(default_factory=tuple)


class RecordingSink:
    """DrawSink that keeps an ordered log of calls for inspection."""

    def __init__(self) -> None:
        self.calls: list[DrawCall] = []

    def clear_surface(self, width: float, height: float) -> None:
        self.calls.append(DrawCall("clear_surface", (width, height)))

    def move_to(self, x: float, y: float) -> None:
        self.calls.append(DrawCall("move_to", (x, y)))

    def line_to(self, x: float, y: float) -> None:
        self.calls.append(DrawCall("line_to", (x, y)))

    def stroke(self, color: str, width: float) -> None:
        self.calls.append(DrawCall("stroke", (color, width)))

    def begin_shape(self) -> None:
        self.calls.append(DrawCall("begin_shape"))

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self.calls.append(DrawCall("fill_circle", (x, y, radius, color)))

    def ops(self) -> list[str]:
        """Names of recorded primitives in order."""
        return [c.op for c in self.calls]

    def find(self, op: str) -> list[DrawCall]:
        return [c for c in self.calls if c.op == op]

    def reset(self) -> None:
        self.calls.clear()
