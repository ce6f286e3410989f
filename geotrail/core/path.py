"""
Path Accumulator
================

Owns the ordered sequence of visited points and the running total distance.

Usage:
    acc = PathAccumulator()
    acc.subscribe(lambda a: print(f"{len(a.path)} points, {a.total_distance:.1f}m"))

    for point in samples:
        acc.add_sample(point)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from ..domain.models import GeoPoint, PathClosedError
from ..infrastructure.gps.distance import distance, path_length

logger = logging.getLogger(__name__)

PathListener = Callable[["PathAccumulator"], None]


class PathAccumulator:
    """
    Append-only path of GeoPoints with a cached cumulative distance.

    The total is a cache of the pairwise-distance fold over the path:
    ``total_distance == path_length(path)`` holds after every mutation.
    Listeners are notified synchronously after each add_sample and reset.
    Appends are amortized O(1); the tuple snapshot is rebuilt on the first
    read after a change.
    """

    def __init__(self) -> None:
        self._points: list[GeoPoint] = []
        self._snapshot: tuple[GeoPoint, ...] | None = ()
        self._total_meters = 0.0
        self._version = 0
        self._closed = False
        self._listeners: list[PathListener] = []

    @property
    def path(self) -> tuple[GeoPoint, ...]:
        """Read-only snapshot of the path in chronological order."""
        if self._snapshot is None:
            self._snapshot = tuple(self._points)
        return self._snapshot

    @property
    def total_distance(self) -> float:
        """Cumulative distance in meters."""
        return self._total_meters

    @property
    def last_point(self) -> GeoPoint | None:
        """Last known position."""
        return self._points[-1] if self._points else None

    @property
    def version(self) -> int:
        """Mutation counter, bumped on every add_sample and reset."""
        return self._version

    @property
    def closed(self) -> bool:
        return self._closed

    def get_path(self) -> tuple[GeoPoint, ...]:
        return self.path

    def get_total_distance(self) -> float:
        return self._total_meters

    def __len__(self) -> int:
        return len(self._points)

    def add_sample(self, point: GeoPoint) -> None:
        """
        Integrate one sample.

        The first point contributes no distance. Every other point adds the
        distance from the previous point. Repeats and jitter are integrated
        as-is.

        Raises:
            PathClosedError: if the accumulator was closed by a stop.
        """
        if self._closed:
            raise PathClosedError("cannot add samples after tracking stopped")

        if self._points:
            segment = distance(self._points[-1], point)
            new_total = self._total_meters + segment
        else:
            segment = 0.0
            new_total = 0.0

        # Path and total both change before anyone is notified
        self._points.append(point)
        self._total_meters = new_total
        self._snapshot = None
        self._version += 1

        logger.debug(
            "Sample %s: +%.2fm, total %.2fm over %d points",
            point, segment, new_total, len(self._points),
        )
        self._notify()

    def reset(self) -> None:
        """Clear the path and zero the total distance."""
        self._points = []
        self._total_meters = 0.0
        self._snapshot = ()
        self._version += 1
        logger.debug("Path reset")
        self._notify()

    def close(self) -> None:
        """Refuse further samples until reopened."""
        self._closed = True

    def reopen(self) -> None:
        self._closed = False

    def verify(self, rel_tol: float = 1e-6) -> bool:
        """Check the cached total against a fresh fold over the path."""
        return math.isclose(
            self._total_meters, path_length(self._points), rel_tol=rel_tol, abs_tol=1e-9
        )

    def subscribe(self, listener: PathListener) -> None:
        """Register a callback invoked after every path change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: PathListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error("Path listener error: %s", e)

    def to_dict(self) -> dict:
        """Export accumulator state as dictionary."""
        last = self.last_point
        return {
            "points_count": len(self._points),
            "total_meters": self._total_meters,
            "total_km": self._total_meters / 1000.0,
            "last_lat": last.latitude if last else None,
            "last_lon": last.longitude if last else None,
            "version": self._version,
        }
