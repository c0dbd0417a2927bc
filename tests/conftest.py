"""Global pytest fixtures & helpers.

Adds project root to path and provides trail factories plus a fake
directions provider shared by the planning and analysis tests.
"""
from __future__ import annotations

import math
import os
import sys
from typing import Callable, List, Optional, Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from runroute.errors import RoutingUnavailableError
from runroute.geometry.primitives import EARTH_RADIUS_KM, haversine_distance_km
from runroute.models import DirectionsPath, GeoPoint, PathSegment, Waypoint

# Degrees of latitude per kilometre along a meridian under the haversine model.
MERIDIAN_DEG_PER_KM = 180.0 / (math.pi * EARTH_RADIUS_KM)


# --- Factory helpers -------------------------------------------------
def make_meridian_trail(
    total_km: float,
    step_km: float = 0.1,
    duration_s: float = 0.0,
    *,
    start_lat: float = 10.0,
    lng: float = 20.0,
    start_ms: float = 1_700_000_000_000.0,
    climb_per_step_m: Optional[float] = None,
) -> List[GeoPoint]:
    """Straight northbound trail at constant speed."""
    steps = int(round(total_km / step_km))
    kms = [min(i * step_km, total_km) for i in range(steps + 1)]
    if kms[-1] < total_km:
        kms.append(total_km)
    return [
        GeoPoint(
            latitude=start_lat + km * MERIDIAN_DEG_PER_KM,
            longitude=lng,
            altitude=(100.0 + i * climb_per_step_m)
            if climb_per_step_m is not None
            else None,
            timestamp_ms=start_ms + duration_s * 1000.0 * (km / total_km),
        )
        for i, km in enumerate(kms)
    ]


def make_waypoints(locations: Sequence[GeoPoint]) -> List[Waypoint]:
    return [
        Waypoint(id=f"wp{i}", location=loc, order=i) for i, loc in enumerate(locations)
    ]


class FakeDirectionsProvider:
    """In-memory provider: straight legs through the requested points.

    ``distance_fn`` decides the reported distance from (origin, waypoints);
    by default it is the haversine length of the straight path. ``failures``
    lists call numbers (1-based) that raise instead.
    """

    def __init__(
        self,
        distance_fn: Optional[Callable[[GeoPoint, Sequence[GeoPoint]], float]] = None,
        *,
        failures: Sequence[int] = (),
        error: Optional[RoutingUnavailableError] = None,
        seconds_per_km: int = 360,
    ) -> None:
        self.distance_fn = distance_fn
        self.failures = set(failures)
        self.error = error or RoutingUnavailableError(
            "Google API returned status: ZERO_RESULTS", status="ZERO_RESULTS"
        )
        self.seconds_per_km = seconds_per_km
        self.calls: List[tuple] = []

    def get_path(self, origin, destination, waypoints=None):
        via = list(waypoints or [])
        self.calls.append((origin, destination, via))
        if len(self.calls) in self.failures:
            raise self.error
        path = [origin, *via, destination]
        if self.distance_fn is not None:
            distance_km = self.distance_fn(origin, via)
        else:
            distance_km = sum(
                haversine_distance_km(a, b) for a, b in zip(path, path[1:])
            )
        return DirectionsPath(
            polyline=path,
            segments=[
                PathSegment(
                    distance_km=distance_km,
                    duration_s=int(distance_km * self.seconds_per_km),
                )
            ],
        )


def mean_radius_distance(origin: GeoPoint, via: Sequence[GeoPoint]) -> float:
    """Street distance model: mean ring radius times 5.657."""
    if not via:
        return 0.0
    radii = [haversine_distance_km(origin, wp) for wp in via]
    return sum(radii) / len(radii) * 5.657


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def start_point() -> GeoPoint:
    return GeoPoint(51.5007, -0.1246)


@pytest.fixture
def fake_provider() -> FakeDirectionsProvider:
    return FakeDirectionsProvider()


@pytest.fixture
def radius_provider() -> FakeDirectionsProvider:
    return FakeDirectionsProvider(mean_radius_distance)
