"""
Geodesic Distance
=================

Great-circle distance between positions using the Haversine formula.

Usage:
    meters = distance(GeoPoint(latitude=0, longitude=0), GeoPoint(latitude=0, longitude=1))
    print(f"{meters:.1f}m")  # ~111195m
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from ...domain.models import GeoPoint

EARTH_RADIUS_METERS = 6371000


def calculate_distance(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """
    Calculate distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters between two GeoPoints."""
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def path_length(points: Iterable[GeoPoint]) -> float:
    """Sum of consecutive-pair distances over an ordered sequence of points."""
    total = 0.0
    previous: GeoPoint | None = None
    for point in points:
        if previous is not None:
            total += distance(previous, point)
        previous = point
    return total
