"""Distance primitives shared by the simplifier, generator and analyzer."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import InvalidInputError
from ..models import GeoPoint

EARTH_RADIUS_KM = 6371.0

# Planar scale used by the perpendicular distance. Fixed regardless of
# latitude, so east-west offsets are overstated away from the equator.
KM_PER_DEGREE_PLANAR = 111.32

# Scale used when converting ring radii to degrees for waypoint placement.
KM_PER_DEGREE_LATITUDE = 111.0

CoordArray = NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class DegreesPerKm:
    lat_deg_per_km: float
    lng_deg_per_km: float


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""

    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    sin_lat = math.sin(d_lat / 2)
    sin_lon = math.sin(d_lon / 2)
    h = sin_lat * sin_lat + (math.cos(lat1) * math.cos(lat2)) * (sin_lon * sin_lon)
    h = min(h, 1.0)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def perpendicular_distance_km(
    point: GeoPoint, line_start: GeoPoint, line_end: GeoPoint
) -> float:
    """Distance from ``point`` to the segment ``[line_start, line_end]``.

    Degrees are treated as planar coordinates scaled by 111.32 km/degree and the
    projection is clamped to the segment, so points beyond either end measure
    against that endpoint. Do not compare the result with haversine distances.
    """

    x, y = point.latitude, point.longitude
    x1, y1 = line_start.latitude, line_start.longitude
    c = line_end.latitude - x1
    d = line_end.longitude - y1
    len_sq = c * c + d * d
    param = 0.0
    if len_sq != 0:
        param = ((x - x1) * c + (y - y1) * d) / len_sq
        param = min(max(param, 0.0), 1.0)
    dx = x - (x1 + param * c)
    dy = y - (y1 + param * d)
    return math.sqrt(dx * dx + dy * dy) * KM_PER_DEGREE_PLANAR


def degrees_per_km(at_latitude: float) -> DegreesPerKm:
    """Return degree offsets per kilometre at ``at_latitude``.

    Longitude degrees shrink with ``cos(latitude)``; the poles are not a
    supported input domain.
    """

    if not math.isfinite(at_latitude) or abs(at_latitude) >= 90.0:
        raise InvalidInputError(
            f"Cannot convert kilometres to degrees at latitude {at_latitude}"
        )
    lat_deg = 1.0 / KM_PER_DEGREE_LATITUDE
    lng_deg = 1.0 / (KM_PER_DEGREE_LATITUDE * math.cos(math.radians(at_latitude)))
    return DegreesPerKm(lat_deg_per_km=lat_deg, lng_deg_per_km=lng_deg)


def as_coord_array(points: Sequence[GeoPoint]) -> CoordArray:
    """Return an ``(n, 2)`` float array of latitude/longitude rows."""

    if not points:
        return np.empty((0, 2), dtype=float)
    return np.asarray([(p.latitude, p.longitude) for p in points], dtype=float)


def haversine_km_array(first: CoordArray, second: CoordArray) -> CoordArray:
    """Row-wise haversine distance between two ``(n, 2)`` degree arrays."""

    lat1 = np.radians(first[:, 0])
    lat2 = np.radians(second[:, 0])
    d_lat = np.radians(second[:, 0] - first[:, 0])
    d_lon = np.radians(second[:, 1] - first[:, 1])
    h = np.sin(d_lat / 2) ** 2 + (np.cos(lat1) * np.cos(lat2)) * np.sin(d_lon / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def segment_lengths_km(points: Sequence[GeoPoint]) -> CoordArray:
    """Haversine length of each consecutive pair in ``points``."""

    coords = as_coord_array(points)
    if len(coords) < 2:
        return np.empty(0, dtype=float)
    return haversine_km_array(coords[:-1], coords[1:])


def path_length_km(points: Sequence[GeoPoint]) -> float:
    """Total haversine length of a polyline; 0 for fewer than two points."""

    return float(np.sum(segment_lengths_km(points)))


__all__ = [
    "EARTH_RADIUS_KM",
    "KM_PER_DEGREE_PLANAR",
    "DegreesPerKm",
    "as_coord_array",
    "degrees_per_km",
    "haversine_distance_km",
    "haversine_km_array",
    "path_length_km",
    "perpendicular_distance_km",
    "segment_lengths_km",
]
