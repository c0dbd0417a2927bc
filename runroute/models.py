"""Dataclasses describing geographic points, routes, and run analysis results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import math
import numbers
import uuid
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvalidInputError


def new_id(prefix: str) -> str:
    """Return a short random identifier such as ``route_1f2e3d4c5b6a``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _check_coordinate(name: str, value: float, limit: float) -> None:
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if abs(value) > limit:
        raise InvalidInputError(f"{name} {value} outside [-{limit}, {limit}]")


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate, optionally carrying tracking telemetry."""

    latitude: float
    longitude: float
    altitude: Optional[float] = None  # metres
    accuracy: Optional[float] = None  # metres
    speed: Optional[float] = None  # m/s
    timestamp_ms: Optional[float] = None  # epoch milliseconds

    def __post_init__(self) -> None:
        _check_coordinate("latitude", self.latitude, 90.0)
        _check_coordinate("longitude", self.longitude, 180.0)

    def same_location(self, other: "GeoPoint") -> bool:
        """Return True when both points share exact coordinates."""
        return (
            self.latitude == other.latitude and self.longitude == other.longitude
        )

    def location_only(self) -> "GeoPoint":
        """Return a copy stripped of telemetry fields."""
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Waypoint:
    """Intermediate point a route passes through, in ``order`` sequence."""

    id: str
    location: GeoPoint
    order: int

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude


def check_waypoint_orders(waypoints: Sequence[Waypoint]) -> None:
    """Raise unless waypoint orders are unique and contiguous from zero."""

    orders = sorted(wp.order for wp in waypoints)
    if orders != list(range(len(orders))):
        raise InvalidInputError(
            f"Waypoint orders must be unique and contiguous from 0, got {orders}"
        )


@dataclass(slots=True)
class Route:
    """A planned or saved route and the path that realises it."""

    id: str
    start: GeoPoint
    end: GeoPoint
    waypoints: List[Waypoint]
    polyline: List[GeoPoint]
    distance_km: float
    estimated_duration_s: int
    is_loop: bool
    target_distance_km: Optional[float] = None
    name: Optional[str] = None
    seed: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.is_loop and not self.start.same_location(self.end):
            raise InvalidInputError("Loop routes must start and end at the same point")
        check_waypoint_orders(self.waypoints)

    @property
    def is_usable(self) -> bool:
        return len(self.polyline) >= 2

    def ordered_waypoints(self) -> List[Waypoint]:
        return sorted(self.waypoints, key=lambda wp: wp.order)


@dataclass(frozen=True, slots=True)
class PathSegment:
    """Distance and duration of one provider leg."""

    distance_km: float
    duration_s: int


@dataclass(slots=True)
class DirectionsPath:
    """Polyline and per-leg metrics returned by a directions provider."""

    polyline: List[GeoPoint]
    segments: List[PathSegment]

    @property
    def distance_km(self) -> float:
        return sum(segment.distance_km for segment in self.segments)

    @property
    def duration_s(self) -> int:
        return sum(segment.duration_s for segment in self.segments)

    @property
    def is_usable(self) -> bool:
        return len(self.polyline) >= 2 and bool(self.segments)


@dataclass(slots=True)
class GeneratedLoopCore:
    """Best loop found by a generation run; every field comes from one call."""

    waypoints: List[Waypoint]
    polyline: List[GeoPoint]
    distance_km: float
    duration_s: int
    seed: int
    target_distance_km: float
    attempts: int
    within_tolerance: bool

    @property
    def distance_error_km(self) -> float:
        """Signed difference between achieved and requested distance."""
        return self.distance_km - self.target_distance_km

    @property
    def distance_error_ratio(self) -> float:
        return self.distance_error_km / self.target_distance_km


@dataclass(slots=True)
class PaceInterval:
    """One split of a completed run."""

    distance_km: float
    pace_s_per_km: float
    duration_s: int
    elevation_gain_m: Optional[float] = None


@dataclass(slots=True)
class Run:
    """Completed run as handed over by the tracking layer."""

    id: str
    user_id: str
    start_time: datetime
    duration_s: int
    distance_km: float
    polyline: List[GeoPoint]


@dataclass(slots=True)
class RunSummary:
    """Whole-run metrics derived from a GPS trail."""

    distance_km: float
    duration_s: int
    average_pace_s_per_km: float
    average_speed_kmh: float
    elevation_gain_m: float


__all__ = [
    "GeoPoint",
    "Waypoint",
    "Route",
    "PathSegment",
    "DirectionsPath",
    "GeneratedLoopCore",
    "PaceInterval",
    "Run",
    "RunSummary",
    "check_waypoint_orders",
    "new_id",
]
