"""Douglas-Peucker polyline simplification (shapely) with a point budget."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Sequence, Tuple

from shapely.geometry import LineString

from ..config import (
    SIMPLIFY_MAX_POINTS,
    SIMPLIFY_PREVIEW_TOLERANCE_KM,
    SIMPLIFY_SAVE_TOLERANCE_KM,
)
from ..errors import InvalidInputError
from ..models import GeoPoint
from .primitives import KM_PER_DEGREE_PLANAR

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SimplificationResult:
    """Simplified points plus the tolerance that produced them."""

    points: List[GeoPoint]
    tolerance_km: float
    capped: bool


def douglas_peucker(points: Sequence[GeoPoint], tolerance_km: float) -> List[GeoPoint]:
    """Simplify ``points`` keeping every vertex that deviates more than ``tolerance_km``.

    Degrees are treated as planar coordinates, so the tolerance is converted
    with the same 111.32 km/degree scale as :func:`perpendicular_distance_km`.
    The original :class:`GeoPoint` objects are returned, telemetry included.
    """

    if len(points) <= 2:
        return list(points)
    line = LineString([(p.latitude, p.longitude) for p in points])
    simplified = line.simplify(
        tolerance_km / KM_PER_DEGREE_PLANAR, preserve_topology=False
    )
    kept = list(simplified.coords)
    if len(kept) < 2:
        return [points[0], points[-1]]
    return _match_original_points(points, kept)


def _match_original_points(
    points: Sequence[GeoPoint], kept: Sequence[Tuple[float, float]]
) -> List[GeoPoint]:
    """Map kept coordinates back onto ``points``; kept vertices are an ordered subsequence."""

    result = [points[0]]
    cursor = 1
    last = len(points) - 1
    for lat, lng in kept[1:-1]:
        while cursor < last and not _at(points[cursor], lat, lng):
            cursor += 1
        result.append(points[cursor])
        cursor += 1
    result.append(points[last])
    return result


def _at(point: GeoPoint, lat: float, lng: float) -> bool:
    return point.latitude == lat and point.longitude == lng


def simplify_with_budget(
    points: Sequence[GeoPoint],
    tolerance_km: float = SIMPLIFY_SAVE_TOLERANCE_KM,
    max_points: int = SIMPLIFY_MAX_POINTS,
) -> SimplificationResult:
    """Simplify ``points`` and double the tolerance until the result fits ``max_points``.

    Every retry starts again from the original input. The cap is a deliberate
    approximation: dense trails lose shape detail in exchange for a bounded
    rendering cost.
    """

    if tolerance_km <= 0:
        raise InvalidInputError(f"tolerance_km must be positive, got {tolerance_km}")
    if max_points < 2:
        raise InvalidInputError(f"max_points must be at least 2, got {max_points}")
    if len(points) < 2:
        return SimplificationResult(list(points), tolerance_km, False)

    effective_tolerance = tolerance_km
    simplified = douglas_peucker(points, effective_tolerance)
    capped = False
    while len(simplified) > max_points:
        effective_tolerance *= 2
        simplified = douglas_peucker(points, effective_tolerance)
        capped = True
    if capped:
        LOGGER.debug(
            "Simplified %d points to %d after raising tolerance %.6f -> %.6f km",
            len(points),
            len(simplified),
            tolerance_km,
            effective_tolerance,
        )
    return SimplificationResult(simplified, effective_tolerance, capped)


def simplify_polyline(
    points: Sequence[GeoPoint],
    tolerance_km: float = SIMPLIFY_SAVE_TOLERANCE_KM,
    max_points: int = SIMPLIFY_MAX_POINTS,
) -> List[GeoPoint]:
    """Return the simplified point list (see :func:`simplify_with_budget`)."""

    return simplify_with_budget(points, tolerance_km, max_points).points


def simplify_for_preview(points: Sequence[GeoPoint]) -> List[GeoPoint]:
    """Coarser simplification for feed and thumbnail rendering."""

    return simplify_polyline(points, SIMPLIFY_PREVIEW_TOLERANCE_KM)


__all__ = [
    "SimplificationResult",
    "douglas_peucker",
    "simplify_for_preview",
    "simplify_polyline",
    "simplify_with_budget",
]
