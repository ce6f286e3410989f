"""GeoTrail Core - path accumulation, projection, rendering and session control."""

from .path import PathAccumulator
from .projection import BoundingBox, ProjectionFrame, compute_frame
from .renderer import DrawSink, PathRenderer, PathStyle, render
from .session import TrackingSession

__all__ = [
    "BoundingBox",
    "DrawSink",
    "PathAccumulator",
    "PathRenderer",
    "PathStyle",
    "ProjectionFrame",
    "TrackingSession",
    "compute_frame",
    "render",
]
