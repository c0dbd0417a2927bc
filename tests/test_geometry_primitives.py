"""Tests for the haversine, perpendicular distance and degree scale helpers."""

from __future__ import annotations

import math

import pytest

from runroute.errors import InvalidInputError
from runroute.geometry.primitives import (
    degrees_per_km,
    haversine_distance_km,
    path_length_km,
    perpendicular_distance_km,
    segment_lengths_km,
)
from runroute.models import GeoPoint

from conftest import make_meridian_trail


def test_haversine_identity_and_symmetry() -> None:
    a = GeoPoint(51.5007, -0.1246)
    b = GeoPoint(48.8584, 2.2945)
    assert haversine_distance_km(a, a) == 0.0
    assert haversine_distance_km(a, b) == haversine_distance_km(b, a)
    # London -> Paris landmarks, roughly 340 km.
    assert haversine_distance_km(a, b) == pytest.approx(340.6, abs=2.0)


def test_haversine_one_degree_of_latitude() -> None:
    expected = 6371.0 * math.pi / 180.0
    assert haversine_distance_km(GeoPoint(0, 0), GeoPoint(1, 0)) == pytest.approx(
        expected
    )


def test_haversine_antipodes_do_not_fail() -> None:
    distance = haversine_distance_km(GeoPoint(0, 0), GeoPoint(0, 180))
    assert distance == pytest.approx(6371.0 * math.pi)


def test_perpendicular_distance_uses_planar_scale() -> None:
    start, end = GeoPoint(0, 0), GeoPoint(0, 2)
    assert perpendicular_distance_km(GeoPoint(1, 1), start, end) == pytest.approx(
        111.32
    )


def test_perpendicular_distance_clamps_to_segment_ends() -> None:
    start, end = GeoPoint(0, 0), GeoPoint(0, 1)
    beyond = GeoPoint(0, 3)
    assert perpendicular_distance_km(beyond, start, end) == pytest.approx(2 * 111.32)
    before = GeoPoint(0, -1)
    assert perpendicular_distance_km(before, start, end) == pytest.approx(111.32)


def test_perpendicular_distance_degenerate_segment_measures_to_start() -> None:
    anchor = GeoPoint(0, 0)
    assert perpendicular_distance_km(GeoPoint(3, 4), anchor, anchor) == pytest.approx(
        5 * 111.32
    )


def test_degrees_per_km_at_equator_and_sixty_degrees() -> None:
    equator = degrees_per_km(0.0)
    assert equator.lat_deg_per_km == pytest.approx(1 / 111)
    assert equator.lng_deg_per_km == pytest.approx(1 / 111)
    sixty = degrees_per_km(60.0)
    assert sixty.lng_deg_per_km == pytest.approx(2 / 111)


@pytest.mark.parametrize("latitude", [90.0, -90.0, float("nan")])
def test_degrees_per_km_rejects_poles(latitude: float) -> None:
    with pytest.raises(InvalidInputError):
        degrees_per_km(latitude)


def test_path_length_of_straight_trail() -> None:
    trail = make_meridian_trail(2.5)
    assert path_length_km(trail) == pytest.approx(2.5)
    assert len(segment_lengths_km(trail)) == len(trail) - 1


def test_path_length_of_short_inputs_is_zero() -> None:
    assert path_length_km([]) == 0.0
    assert path_length_km([GeoPoint(1, 1)]) == 0.0
