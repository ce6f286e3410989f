"""
Scale-to-fit projection of a lat/lon path onto a pixel surface.

Latitude maps to the vertical axis inverted (north is up, pixel rows grow
downward). Scale is uniform so the path keeps its aspect ratio.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..domain.models import GeoPoint

DEFAULT_FIT_MARGIN = 0.95
DEFAULT_MIN_EFFECTIVE_RANGE = 0.0001  # degrees, roughly 10-20m


@dataclass(frozen=True)
class BoundingBox:
    """Lat/lon-aligned rectangle enclosing a set of points."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def lat_range(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_range(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def is_zero_extent(self) -> bool:
        """True when every point is identical."""
        return self.lat_range == 0 and self.lon_range == 0

    @classmethod
    def from_points(cls, points: Sequence[GeoPoint]) -> BoundingBox | None:
        """Single scan over points. None for an empty sequence."""
        if not points:
            return None

        first = points[0]
        min_lat = max_lat = first.latitude
        min_lon = max_lon = first.longitude
        for p in points:
            min_lat = min(min_lat, p.latitude)
            max_lat = max(max_lat, p.latitude)
            min_lon = min(min_lon, p.longitude)
            max_lon = max(max_lon, p.longitude)

        return cls(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


@dataclass(frozen=True)
class ProjectionFrame:
    """Mapping from GeoPoint to surface pixels for one render pass."""

    scale: float
    offset_x: float
    offset_y: float
    min_lon: float
    max_lat: float
    surface_width: float
    surface_height: float
    centered: bool = False

    def project(self, point: GeoPoint) -> tuple[float, float]:
        """Project a point to (x, y) surface coordinates."""
        if self.centered:
            return self.surface_width / 2, self.surface_height / 2

        x = (point.longitude - self.min_lon) * self.scale + self.offset_x
        y = (self.max_lat - point.latitude) * self.scale + self.offset_y
        return x, y

    def project_all(self, points: Sequence[GeoPoint]) -> list[tuple[float, float]]:
        return [self.project(p) for p in points]


def compute_frame(
    path: Sequence[GeoPoint],
    surface_width: float,
    surface_height: float,
    *,
    fit_margin: float = DEFAULT_FIT_MARGIN,
    min_effective_range: float = DEFAULT_MIN_EFFECTIVE_RANGE,
) -> ProjectionFrame | None:
    """
    Derive the projection for a path on a surface of the given size.

    Args:
        path: Points in rendering order
        surface_width, surface_height: Surface size in pixels
        fit_margin: Fraction of each surface dimension the path may occupy
        min_effective_range: Floor for lat/lon ranges in degrees

    Returns:
        ProjectionFrame, or None for an empty path. Paths with fewer than two
        points or zero extent get a centered frame.
    """
    bbox = BoundingBox.from_points(path)
    if bbox is None:
        return None

    if len(path) < 2 or bbox.is_zero_extent:
        return ProjectionFrame(
            scale=0.0,
            offset_x=surface_width / 2,
            offset_y=surface_height / 2,
            min_lon=bbox.min_lon,
            max_lat=bbox.max_lat,
            surface_width=surface_width,
            surface_height=surface_height,
            centered=True,
        )

    effective_lat_range = max(bbox.lat_range, min_effective_range)
    effective_lon_range = max(bbox.lon_range, min_effective_range)

    scale_x = (surface_width * fit_margin) / effective_lon_range
    scale_y = (surface_height * fit_margin) / effective_lat_range
    scale = min(scale_x, scale_y)

    rendered_width = effective_lon_range * scale
    rendered_height = effective_lat_range * scale

    return ProjectionFrame(
        scale=scale,
        offset_x=(surface_width - rendered_width) / 2,
        offset_y=(surface_height - rendered_height) / 2,
        min_lon=bbox.min_lon,
        max_lat=bbox.max_lat,
        surface_width=surface_width,
        surface_height=surface_height,
    )
