"""
GeoTrail Path Renderer.

Replays an accumulated path as draw primitives against a drawing sink.
Geometry is recomputed from scratch on every pass.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..domain.models import GeoPoint
from .projection import (
    DEFAULT_FIT_MARGIN,
    DEFAULT_MIN_EFFECTIVE_RANGE,
    ProjectionFrame,
    compute_frame,
)

if TYPE_CHECKING:
    from .path import PathAccumulator

logger = logging.getLogger(__name__)


@runtime_checkable
class DrawSink(Protocol):
    """Primitive operations a rendering surface must provide."""

    def clear_surface(self, width: float, height: float) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def stroke(self, color: str, width: float) -> None: ...

    def begin_shape(self) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None: ...


@dataclass
class PathStyle:
    """Stroke and marker styling."""
    line_color: str = "#007bff"
    line_width: float = 4
    start_color: str = "#28a745"    # start marker
    end_color: str = "#dc3545"      # end marker
    marker_radius: float = 6


def render(
    path: Sequence[GeoPoint],
    surface_width: float,
    surface_height: float,
    sink: DrawSink,
    style: PathStyle | None = None,
    *,
    fit_margin: float = DEFAULT_FIT_MARGIN,
    min_effective_range: float = DEFAULT_MIN_EFFECTIVE_RANGE,
) -> ProjectionFrame | None:
    """
    Draw the path onto the sink.

    Clears the surface, then strokes the projected path and draws a start
    marker, plus an end marker when there is more than one point. Never
    raises for degenerate input: an empty path only clears, a single point
    or zero-extent path is drawn at the surface center.

    Returns:
        The ProjectionFrame used, or None when the path is empty.
    """
    style = style or PathStyle()

    sink.clear_surface(surface_width, surface_height)

    frame = compute_frame(
        path,
        surface_width,
        surface_height,
        fit_margin=fit_margin,
        min_effective_range=min_effective_range,
    )
    if frame is None:
        return None
    coords = frame.project_all(path)

    start_x, start_y = coords[0]
    sink.begin_shape()
    sink.move_to(start_x, start_y)
    for x, y in coords[1:]:
        sink.line_to(x, y)
    sink.stroke(style.line_color, style.line_width)

    sink.begin_shape()
    sink.fill_circle(start_x, start_y, style.marker_radius, style.start_color)

    if len(coords) > 1:
        end_x, end_y = coords[-1]
        sink.begin_shape()
        sink.fill_circle(end_x, end_y, style.marker_radius, style.end_color)

    return frame


class PathRenderer:
    """
    Re-renders a path whenever it changes or the surface is resized.

    Holds a read-only reference to the accumulator it is attached to and
    never mutates it.
    """

    def __init__(
        self,
        sink: DrawSink,
        width: float,
        height: float,
        style: PathStyle | None = None,
        *,
        fit_margin: float = DEFAULT_FIT_MARGIN,
        min_effective_range: float = DEFAULT_MIN_EFFECTIVE_RANGE,
    ) -> None:
        self.sink = sink
        self.width = width
        self.height = height
        self.style = style or PathStyle()
        self.fit_margin = fit_margin
        self.min_effective_range = min_effective_range
        self._source: PathAccumulator | None = None
        self._frames_rendered = 0
        self._last_frame: ProjectionFrame | None = None

    @property
    def frames_rendered(self) -> int:
        return self._frames_rendered

    @property
    def last_frame(self) -> ProjectionFrame | None:
        return self._last_frame

    def attach(self, accumulator: PathAccumulator) -> None:
        """Subscribe to path changes and draw the current state."""
        self.detach()
        self._source = accumulator
        accumulator.subscribe(self._on_path_changed)
        self.redraw()

    def detach(self) -> None:
        if self._source is not None:
            self._source.unsubscribe(self._on_path_changed)
            self._source = None

    def resize(self, width: float, height: float) -> None:
        """Handle a surface size change."""
        logger.debug("Surface resized to %sx%s", width, height)
        self.width = width
        self.height = height
        self.redraw()

    def redraw(self) -> ProjectionFrame | None:
        path = self._source.path if self._source is not None else ()
        return self.draw(path)

    def draw(self, path: Sequence[GeoPoint]) -> ProjectionFrame | None:
        self._last_frame = render(
            path,
            self.width,
            self.height,
            self.sink,
            self.style,
            fit_margin=self.fit_margin,
            min_effective_range=self.min_effective_range,
        )
        self._frames_rendered += 1
        return self._last_frame

    def _on_path_changed(self, accumulator: PathAccumulator) -> None:
        self.draw(accumulator.path)
