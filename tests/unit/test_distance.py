"""
Geodesic Distance Unit Tests
============================

Tests for haversine distance and the path-length fold.
"""

import math

import pytest

from geotrail.domain.models import GeoPoint
from geotrail.infrastructure.gps.distance import (
    EARTH_RADIUS_METERS,
    calculate_distance,
    distance,
    path_length,
)


def P(lat: float, lon: float) -> GeoPoint:
    return GeoPoint(latitude=lat, longitude=lon)


class TestHaversineFormula:
    """Tests for haversine distance calculation."""

    def test_earth_radius(self):
        assert EARTH_RADIUS_METERS == 6371000

    def test_same_point_zero_distance(self):
        """Same point should return 0."""
        assert distance(P(41.0, 29.0), P(41.0, 29.0)) == 0.0
        assert calculate_distance(-33.86, 151.2, -33.86, 151.2) == 0.0

    def test_equator_one_degree(self):
        """One degree longitude at equator is R * pi / 180."""
        d = distance(P(0, 0), P(0, 1))
        expected = EARTH_RADIUS_METERS * math.pi / 180  # ~111195m
        assert d == pytest.approx(expected, abs=1e-6)
        assert 111_100 < d < 111_350

    def test_one_degree_latitude_matches_longitude_at_equator(self):
        d_lat = distance(P(0, 0), P(1, 0))
        d_lon = distance(P(0, 0), P(0, 1))
        assert d_lat == pytest.approx(d_lon, rel=1e-9)

    def test_known_distance_istanbul_ankara(self):
        """Istanbul to Ankara is approximately 350km."""
        km = calculate_distance(41.0082, 28.9784, 39.9334, 32.8597) / 1000
        assert 340 < km < 360

    def test_longitude_shrinks_with_latitude(self):
        at_equator = distance(P(0, 0), P(0, 1))
        at_sixty = distance(P(60, 0), P(60, 1))
        assert at_sixty == pytest.approx(at_equator / 2, rel=1e-3)

    @pytest.mark.parametrize(
        "a,b",
        [
            ((41.0, 29.0), (42.0, 30.0)),
            ((-45.5, 170.2), (12.3, -60.0)),
            ((0.0, 179.9), (0.0, -179.9)),
            ((89.0, 0.0), (-89.0, 180.0)),
        ],
    )
    def test_symmetry(self, a, b):
        """Distance A->B should equal B->A."""
        d1 = distance(P(*a), P(*b))
        d2 = distance(P(*b), P(*a))
        assert d1 == pytest.approx(d2, rel=1e-6)

    def test_antimeridian_is_short(self):
        """Crossing the 180th meridian takes the short way round."""
        d = distance(P(0.0, 179.9), P(0.0, -179.9))
        assert d < 30_000

    def test_coordinate_form_matches_point_form(self):
        assert calculate_distance(10, 20, 11, 21) == distance(P(10, 20), P(11, 21))


class TestPathLength:
    """Tests for the pairwise-distance fold."""

    def test_empty_and_single(self):
        assert path_length([]) == 0.0
        assert path_length([P(1, 1)]) == 0.0

    def test_sum_of_segments(self):
        pts = [P(0, 0), P(0, 0.001), P(0.001, 0.001)]
        expected = distance(pts[0], pts[1]) + distance(pts[1], pts[2])
        assert path_length(pts) == pytest.approx(expected)

    def test_accepts_generators(self):
        pts = (P(0, i * 0.001) for i in range(4))
        assert path_length(pts) == pytest.approx(3 * distance(P(0, 0), P(0, 0.001)), rel=1e-6)
