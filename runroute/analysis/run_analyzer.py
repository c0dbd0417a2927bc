"""Post-run analysis: loop detection, splits, duplicate detection and summaries."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..config import (
    INTERVAL_MIN_PARTIAL_KM,
    LOOP_DETECTION_THRESHOLD_KM,
    POLYLINE_MATCH_POINTS,
    POLYLINE_MATCH_TOLERANCE_KM,
)
from ..errors import InvalidInputError
from ..geometry.primitives import (
    as_coord_array,
    haversine_distance_km,
    haversine_km_array,
    path_length_km,
    segment_lengths_km,
)
from ..models import GeoPoint, PaceInterval, Route, RunSummary

LOGGER = logging.getLogger(__name__)

# Relative slack absorbing float drift when a trail ends exactly on a boundary.
_BOUNDARY_RELATIVE_EPSILON = 1e-9

# Smallest split length accepted (10 m).
MIN_INTERVAL_DISTANCE_KM = 0.01


def is_loop(
    trail: Sequence[GeoPoint], threshold_km: float = LOOP_DETECTION_THRESHOLD_KM
) -> bool:
    """Return True when the trail ends within ``threshold_km`` of where it began."""

    if len(trail) < 2:
        return False
    return haversine_distance_km(trail[0], trail[-1]) < threshold_km


def total_distance_km(trail: Sequence[GeoPoint]) -> float:
    return path_length_km(trail)


def _climb(prev: GeoPoint, curr: GeoPoint) -> float:
    if prev.altitude is None or curr.altitude is None:
        return 0.0
    return max(curr.altitude - prev.altitude, 0.0)


def _check_timed_trail(trail: Sequence[GeoPoint]) -> None:
    if len(trail) < 2:
        raise InvalidInputError("A trail needs at least two points")
    previous: Optional[float] = None
    for index, point in enumerate(trail):
        if point.timestamp_ms is None:
            raise InvalidInputError(f"Trail point {index} has no timestamp")
        if previous is not None and point.timestamp_ms < previous:
            raise InvalidInputError(
                f"Trail timestamps decrease at point {index} "
                f"({point.timestamp_ms} < {previous})"
            )
        previous = point.timestamp_ms


def compute_intervals(
    trail: Sequence[GeoPoint],
    interval_distance_km: float = 1.0,
    *,
    min_partial_km: float = INTERVAL_MIN_PARTIAL_KM,
) -> List[PaceInterval]:
    """Split a timed trail into fixed-distance intervals.

    Each boundary falls inside the segment that crosses it; the time and the
    climb at the boundary are interpolated linearly along that segment.
    Durations are differences of rounded elapsed seconds so they add up to
    the elapsed time covered. A trailing remainder shorter than
    ``min_partial_km`` is dropped.

    Raises:
        InvalidInputError: fewer than two points, a missing or decreasing
            timestamp, or an interval size below ``MIN_INTERVAL_DISTANCE_KM``.
    """

    if not interval_distance_km >= MIN_INTERVAL_DISTANCE_KM:
        raise InvalidInputError(
            f"interval_distance_km must be at least {MIN_INTERVAL_DISTANCE_KM} km, "
            f"got {interval_distance_km}"
        )
    _check_timed_trail(trail)

    slack_km = interval_distance_km * _BOUNDARY_RELATIVE_EPSILON
    has_altitude = any(point.altitude is not None for point in trail)
    lengths = segment_lengths_km(trail)
    origin_ms = trail[0].timestamp_ms
    intervals: List[PaceInterval] = []

    def close(distance_km: float, elapsed_s: int, gain_m: float) -> None:
        duration_s = elapsed_s - last_elapsed_s
        intervals.append(
            PaceInterval(
                distance_km=distance_km,
                pace_s_per_km=duration_s / distance_km,
                duration_s=duration_s,
                elevation_gain_m=gain_m if has_altitude else None,
            )
        )

    cumulative_km = 0.0
    covered_km = 0.0
    last_elapsed_s = 0
    gain_m = 0.0
    for index, segment_km in enumerate(lengths, start=1):
        prev, curr = trail[index - 1], trail[index]
        segment_km = float(segment_km)
        segment_start_km = cumulative_km
        cumulative_km += segment_km
        climb_m = _climb(prev, curr)
        consumed = 0.0
        while cumulative_km - covered_km >= interval_distance_km - slack_km:
            boundary_km = covered_km + interval_distance_km
            if segment_km > 0:
                fraction = (boundary_km - segment_start_km) / segment_km
                fraction = min(max(fraction, 0.0), 1.0)
            else:
                fraction = 1.0
            elapsed_ms = (prev.timestamp_ms - origin_ms) + fraction * (
                curr.timestamp_ms - prev.timestamp_ms
            )
            elapsed_s = int(round(elapsed_ms / 1000.0))
            gain_m += climb_m * (fraction - consumed)
            close(interval_distance_km, elapsed_s, gain_m)
            consumed = fraction
            covered_km = boundary_km
            last_elapsed_s = elapsed_s
            gain_m = 0.0
        gain_m += climb_m * (1.0 - consumed)

    remainder_km = cumulative_km - covered_km
    if remainder_km >= min_partial_km:
        elapsed_s = int(round((trail[-1].timestamp_ms - origin_ms) / 1000.0))
        close(remainder_km, elapsed_s, gain_m)
    elif remainder_km > slack_km:
        LOGGER.debug("Dropping %.3f km trailing remainder", remainder_km)
    return intervals


def polylines_equal(
    first: Sequence[GeoPoint],
    second: Sequence[GeoPoint],
    tolerance_km: float = POLYLINE_MATCH_TOLERANCE_KM,
) -> bool:
    """Heuristic equality on the first and last few points of two polylines.

    Both polylines need at least ``POLYLINE_MATCH_POINTS`` points. Only the
    leading and trailing points are compared pairwise by haversine distance;
    the middle of the route is ignored, so routes sharing both ends but
    diverging in between compare equal.
    """

    count = POLYLINE_MATCH_POINTS
    if len(first) < count or len(second) < count:
        return False
    a = as_coord_array(first)
    b = as_coord_array(second)
    head = haversine_km_array(a[:count], b[:count])
    tail = haversine_km_array(a[-count:], b[-count:])
    return bool(np.all(head <= tolerance_km) and np.all(tail <= tolerance_km))


def is_duplicate_route(trail: Sequence[GeoPoint], routes: Iterable[Route]) -> bool:
    """Return True if any saved route's polyline matches ``trail``."""

    return any(polylines_equal(trail, route.polyline) for route in routes)


def summarize_run(trail: Sequence[GeoPoint]) -> RunSummary:
    """Whole-trail distance, elapsed time, averages and climb."""

    if len(trail) < 2:
        return RunSummary(0.0, 0, 0.0, 0.0, 0.0)
    distance_km = path_length_km(trail)
    elevation_gain_m = sum(
        _climb(prev, curr) for prev, curr in zip(trail, trail[1:])
    )
    duration_s = 0
    first_ms, last_ms = trail[0].timestamp_ms, trail[-1].timestamp_ms
    if first_ms is not None and last_ms is not None:
        duration_s = max(int(round((last_ms - first_ms) / 1000.0)), 0)
    pace = duration_s / distance_km if distance_km > 0 and duration_s > 0 else 0.0
    speed = distance_km / (duration_s / 3600.0) if duration_s > 0 else 0.0
    return RunSummary(
        distance_km=distance_km,
        duration_s=duration_s,
        average_pace_s_per_km=pace,
        average_speed_kmh=speed,
        elevation_gain_m=elevation_gain_m,
    )


__all__ = [
    "MIN_INTERVAL_DISTANCE_KM",
    "compute_intervals",
    "is_duplicate_route",
    "is_loop",
    "polylines_equal",
    "summarize_run",
    "total_distance_km",
]
