"""Tests for Douglas-Peucker simplification and the point budget."""

from __future__ import annotations

import logging
from typing import List

import pytest

from runroute.errors import InvalidInputError
from runroute.geometry.simplify import (
    douglas_peucker,
    simplify_for_preview,
    simplify_polyline,
    simplify_with_budget,
)
from runroute.models import GeoPoint

from conftest import make_meridian_trail


def _square() -> List[GeoPoint]:
    return [
        GeoPoint(0, 0),
        GeoPoint(0, 1),
        GeoPoint(1, 1),
        GeoPoint(1, 0),
        GeoPoint(0, 0),
    ]


def _zigzag(count: int, amplitude_deg: float = 0.001) -> List[GeoPoint]:
    return [
        GeoPoint(45.0 + i * 0.0001, 7.0 + (amplitude_deg if i % 2 else 0.0))
        for i in range(count)
    ]


def test_square_kept_whole_with_tiny_tolerance() -> None:
    square = _square()
    assert douglas_peucker(square, 1e-9) == square


def test_square_collapses_with_huge_tolerance() -> None:
    assert douglas_peucker(_square(), 1000.0) == [GeoPoint(0, 0), GeoPoint(0, 0)]


def test_straight_line_keeps_only_endpoints() -> None:
    trail = make_meridian_trail(1.0)
    simplified = simplify_polyline(trail)
    assert simplified == [trail[0], trail[-1]]


def test_short_inputs_returned_unchanged() -> None:
    assert simplify_polyline([]) == []
    single = [GeoPoint(1, 2)]
    assert simplify_polyline(single) == single
    pair = [GeoPoint(1, 2), GeoPoint(1, 3)]
    assert simplify_polyline(pair) == pair


def test_endpoints_always_kept() -> None:
    points = _zigzag(301)
    simplified = simplify_polyline(points, tolerance_km=0.5)
    assert simplified[0] == points[0]
    assert simplified[-1] == points[-1]


def test_input_is_not_mutated() -> None:
    points = _zigzag(50)
    before = list(points)
    simplify_polyline(points, tolerance_km=0.01)
    assert points == before


def test_result_is_an_ordered_subsequence() -> None:
    points = _zigzag(200, amplitude_deg=0.0005)
    simplified = simplify_polyline(points, tolerance_km=0.03)
    positions = [points.index(p) for p in simplified]
    assert positions == sorted(positions)


def test_simplify_is_idempotent() -> None:
    points = _zigzag(400, amplitude_deg=0.0004)
    once = simplify_polyline(points, tolerance_km=0.02)
    assert simplify_polyline(once, tolerance_km=0.02) == once


def test_point_budget_caps_dense_trails(caplog: pytest.LogCaptureFixture) -> None:
    points = _zigzag(2000)
    with caplog.at_level(logging.DEBUG, logger="runroute.geometry.simplify"):
        result = simplify_with_budget(points)
    assert len(result.points) <= 500
    assert result.capped is True
    assert result.tolerance_km > 0.00005
    assert result.points[0] == points[0]
    assert result.points[-1] == points[-1]
    assert "raising tolerance" in caplog.text


def test_capped_output_is_idempotent() -> None:
    once = simplify_polyline(_zigzag(2000))
    assert simplify_polyline(once) == once


def test_budget_not_applied_when_under_cap() -> None:
    points = _zigzag(100)
    result = simplify_with_budget(points)
    assert result.capped is False
    assert result.tolerance_km == 0.00005
    assert len(result.points) == 100


def test_custom_point_cap() -> None:
    result = simplify_with_budget(_zigzag(300), max_points=20)
    assert len(result.points) <= 20


def test_preview_is_never_denser_than_save() -> None:
    points = _zigzag(400, amplitude_deg=0.000002)
    assert len(simplify_for_preview(points)) <= len(simplify_polyline(points))


@pytest.mark.parametrize("tolerance", [0.0, -1.0])
def test_rejects_non_positive_tolerance(tolerance: float) -> None:
    with pytest.raises(InvalidInputError):
        simplify_with_budget(_square(), tolerance_km=tolerance)


def test_rejects_point_cap_below_two() -> None:
    with pytest.raises(InvalidInputError):
        simplify_with_budget(_square(), max_points=1)


def test_kept_points_carry_their_telemetry() -> None:
    points = [
        GeoPoint(45.0, 7.0, altitude=200.0, timestamp_ms=0.0),
        GeoPoint(45.0002, 7.001, altitude=201.0, timestamp_ms=1000.0),
        GeoPoint(45.002, 7.01, altitude=205.0, timestamp_ms=2000.0),
        GeoPoint(45.003, 7.0, altitude=203.0, timestamp_ms=3000.0),
    ]
    simplified = douglas_peucker(points, 0.05)
    assert simplified == [points[0], points[2], points[3]]
    assert [p.timestamp_ms for p in simplified] == [0.0, 2000.0, 3000.0]


def test_repeated_coordinates_map_to_later_points() -> None:
    # Out along a meridian, a corner, then back through the start.
    points = [
        GeoPoint(0, 0, timestamp_ms=0.0),
        GeoPoint(0.01, 0, timestamp_ms=1.0),
        GeoPoint(0.01, 0.01, timestamp_ms=2.0),
        GeoPoint(0, 0, timestamp_ms=3.0),
        GeoPoint(-0.01, 0, timestamp_ms=4.0),
    ]
    simplified = douglas_peucker(points, 1e-6)
    assert [p.timestamp_ms for p in simplified] == [0.0, 1.0, 2.0, 3.0, 4.0]
