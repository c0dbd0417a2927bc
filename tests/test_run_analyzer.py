"""Tests for loop detection, split calculation and duplicate detection."""

from __future__ import annotations

import logging

import pytest

from runroute.analysis.run_analyzer import (
    compute_intervals,
    is_duplicate_route,
    is_loop,
    polylines_equal,
    summarize_run,
    total_distance_km,
)
from runroute.errors import InvalidInputError
from runroute.models import GeoPoint, Route
from runroute.units import interval_distance_km

from conftest import MERIDIAN_DEG_PER_KM, make_meridian_trail


def _route(polyline) -> Route:
    return Route(
        id="route_saved",
        start=polyline[0],
        end=polyline[-1],
        waypoints=[],
        polyline=list(polyline),
        distance_km=total_distance_km(polyline),
        estimated_duration_s=0,
        is_loop=False,
    )


# --- loop detection --------------------------------------------------
def test_identical_endpoints_are_a_loop() -> None:
    assert is_loop([GeoPoint(10, 20), GeoPoint(10, 20)]) is True


def test_endpoints_one_km_apart_are_not_a_loop() -> None:
    trail = make_meridian_trail(1.0)
    assert is_loop([trail[0], trail[-1]], threshold_km=0.1) is False


def test_loop_threshold_brackets_endpoint_gap() -> None:
    trail = make_meridian_trail(0.1, step_km=0.1)
    assert is_loop(trail, threshold_km=0.0999) is False
    assert is_loop(trail, threshold_km=0.1001) is True


def test_fewer_than_two_points_is_never_a_loop() -> None:
    assert is_loop([]) is False
    assert is_loop([GeoPoint(1, 1)]) is False


# --- intervals -------------------------------------------------------
def test_straight_trail_splits_into_kilometres() -> None:
    trail = make_meridian_trail(2.5, duration_s=900)
    intervals = compute_intervals(trail, 1.0)
    assert [i.duration_s for i in intervals] == [360, 360, 180]
    assert [i.distance_km for i in intervals[:2]] == [1.0, 1.0]
    assert intervals[2].distance_km == pytest.approx(0.5)
    for interval in intervals:
        assert interval.pace_s_per_km == pytest.approx(360.0, rel=1e-3)
        assert interval.elevation_gain_m is None


def test_boundary_inside_a_long_segment_is_interpolated() -> None:
    # Two points 2.5 km apart: both boundaries fall inside the only segment.
    trail = make_meridian_trail(2.5, step_km=2.5, duration_s=1000)
    assert len(trail) == 2
    intervals = compute_intervals(trail, 1.0)
    assert [i.duration_s for i in intervals] == [400, 400, 200]


def test_intervals_cover_the_whole_trail() -> None:
    base = make_meridian_trail(3.37, step_km=0.05)
    # Uneven pacing: each point gets a slightly different gap.
    elapsed_ms = 0.0
    trail = []
    for index, point in enumerate(base):
        trail.append(
            GeoPoint(point.latitude, point.longitude, timestamp_ms=elapsed_ms)
        )
        elapsed_ms += 14_000 + (index % 7) * 1_300
    intervals = compute_intervals(trail, 1.0)
    assert len(intervals) == 4
    assert sum(i.distance_km for i in intervals) == pytest.approx(
        total_distance_km(trail)
    )
    assert sum(i.duration_s for i in intervals) == round(
        trail[-1].timestamp_ms / 1000
    )


def test_short_tail_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    trail = make_meridian_trail(2.05, step_km=0.05, duration_s=738)
    with caplog.at_level(logging.DEBUG, logger="runroute.analysis.run_analyzer"):
        intervals = compute_intervals(trail, 1.0)
    assert len(intervals) == 2
    assert "trailing remainder" in caplog.text


def test_trail_ending_on_a_boundary_has_no_partial() -> None:
    trail = make_meridian_trail(2.0, duration_s=600)
    intervals = compute_intervals(trail, 1.0)
    assert [i.duration_s for i in intervals] == [300, 300]


def test_mile_splits() -> None:
    trail = make_meridian_trail(3.5, duration_s=1400)
    intervals = compute_intervals(trail, interval_distance_km("miles"))
    assert len(intervals) == 3
    assert intervals[0].distance_km == pytest.approx(1.60934)
    assert intervals[2].distance_km == pytest.approx(3.5 - 2 * 1.60934)
    assert intervals[0].pace_s_per_km == pytest.approx(400.0, rel=1e-3)


def test_elevation_gain_is_split_between_intervals() -> None:
    trail = make_meridian_trail(1.5, duration_s=600, climb_per_step_m=1.0)
    intervals = compute_intervals(trail, 1.0)
    assert [round(i.elevation_gain_m, 6) for i in intervals] == [10.0, 5.0]


def test_descents_do_not_count_as_gain() -> None:
    trail = make_meridian_trail(1.0, duration_s=300, climb_per_step_m=-2.0)
    intervals = compute_intervals(trail, 1.0)
    assert intervals[0].elevation_gain_m == 0.0


def test_interval_pace_is_seconds_per_km() -> None:
    trail = make_meridian_trail(1.2, duration_s=600)
    first, tail = compute_intervals(trail, 1.0)
    assert first.pace_s_per_km == first.duration_s / first.distance_km
    assert tail.pace_s_per_km == pytest.approx(tail.duration_s / 0.2)


def test_intervals_require_two_points() -> None:
    with pytest.raises(InvalidInputError):
        compute_intervals([GeoPoint(0, 0, timestamp_ms=0)])


def test_intervals_require_timestamps() -> None:
    trail = [GeoPoint(0, 0, timestamp_ms=0), GeoPoint(0, 0.1)]
    with pytest.raises(InvalidInputError, match="no timestamp"):
        compute_intervals(trail)


def test_intervals_reject_decreasing_timestamps() -> None:
    trail = [GeoPoint(0, 0, timestamp_ms=5000), GeoPoint(0, 0.1, timestamp_ms=1000)]
    with pytest.raises(InvalidInputError, match="decrease"):
        compute_intervals(trail)


@pytest.mark.parametrize("size", [0.0, -1.0, 1e-12, 0.005, float("nan")])
def test_intervals_reject_tiny_or_non_positive_size(size: float) -> None:
    with pytest.raises(InvalidInputError):
        compute_intervals(make_meridian_trail(2.0, duration_s=600), size)


def test_smallest_interval_size_is_accepted() -> None:
    trail = make_meridian_trail(0.05, step_km=0.01, duration_s=20)
    intervals = compute_intervals(trail, 0.01, min_partial_km=0.001)
    assert len(intervals) == 5
    assert sum(i.duration_s for i in intervals) == 20


# --- duplicate detection ---------------------------------------------
def test_short_polylines_never_match() -> None:
    trail = make_meridian_trail(0.8)
    assert len(trail) == 9
    assert polylines_equal(trail, list(trail)) is False


def test_identical_polylines_match() -> None:
    trail = make_meridian_trail(3.0)
    assert polylines_equal(trail, list(trail)) is True


def test_small_offsets_within_tolerance_match() -> None:
    trail = make_meridian_trail(3.0)
    shifted = [GeoPoint(p.latitude, p.longitude + 0.0003) for p in trail]
    assert polylines_equal(trail, shifted) is True
    assert polylines_equal(trail, shifted, tolerance_km=0.01) is False


def test_middle_of_route_is_ignored() -> None:
    trail = make_meridian_trail(3.0)
    detour = list(trail)
    for index in range(12, 19):
        point = detour[index]
        detour[index] = GeoPoint(point.latitude, point.longitude + 0.05)
    assert polylines_equal(trail, detour) is True


def test_different_ends_do_not_match() -> None:
    trail = make_meridian_trail(3.0)
    moved = list(trail)
    moved[-1] = GeoPoint(
        trail[-1].latitude + 0.2 * MERIDIAN_DEG_PER_KM, trail[-1].longitude
    )
    assert polylines_equal(trail, moved) is False


def test_is_duplicate_route() -> None:
    trail = make_meridian_trail(3.0)
    other = make_meridian_trail(3.0, lng=21.0)
    assert is_duplicate_route(trail, [_route(other), _route(trail)]) is True
    assert is_duplicate_route(trail, [_route(other)]) is False
    assert is_duplicate_route(trail, []) is False


# --- summary ---------------------------------------------------------
def test_summarize_run() -> None:
    trail = make_meridian_trail(5.0, duration_s=1500, climb_per_step_m=0.5)
    summary = summarize_run(trail)
    assert summary.distance_km == pytest.approx(5.0)
    assert summary.duration_s == 1500
    assert summary.average_pace_s_per_km == pytest.approx(300.0)
    assert summary.average_speed_kmh == pytest.approx(12.0)
    assert summary.elevation_gain_m == pytest.approx(25.0)


def test_summarize_short_trail_is_empty() -> None:
    summary = summarize_run([GeoPoint(0, 0)])
    assert summary.distance_km == 0.0
    assert summary.duration_s == 0


def test_summary_duration_matches_split_total() -> None:
    trail = make_meridian_trail(2.5, duration_s=930.6)
    splits = compute_intervals(trail, 1.0)
    summary = summarize_run(trail)
    assert summary.duration_s == 931
    assert sum(split.duration_s for split in splits) == summary.duration_s
