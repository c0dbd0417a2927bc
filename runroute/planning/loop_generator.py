"""Closed-loop route generation around a single start point.

The generator places a ring of waypoints around the start, asks the
directions provider to connect start -> ring -> start, measures the result,
and rescales the ring until the path length lands near the target. Calls are
strictly sequential because each radius correction depends on the previous
measurement.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import random
import secrets
from typing import List, Optional

from ..config import (
    LOG_GENERATION_ATTEMPTS,
    LOOP_DISTANCE_TOLERANCE,
    LOOP_RADIUS_JITTER,
    LOOP_WAYPOINT_COUNT,
    MAX_GENERATION_ATTEMPTS,
    MAX_TARGET_DISTANCE_KM,
    MIN_TARGET_DISTANCE_KM,
    ROAD_EFFICIENCY_FACTOR,
)
from ..directions.base import DirectionsProvider
from ..errors import InvalidInputError, RoutingUnavailableError
from ..geometry.primitives import degrees_per_km
from ..models import GeneratedLoopCore, GeoPoint, Route, Waypoint, new_id

NO_LOOP_FOUND_MESSAGE = "No loop route found for generated waypoints"


@dataclass(slots=True)
class LoopSettings:
    waypoint_count: int = LOOP_WAYPOINT_COUNT
    road_efficiency_factor: float = ROAD_EFFICIENCY_FACTOR
    distance_tolerance: float = LOOP_DISTANCE_TOLERANCE
    max_attempts: int = MAX_GENERATION_ATTEMPTS
    radius_jitter: float = LOOP_RADIUS_JITTER

    def validate(self) -> None:
        if self.waypoint_count < 1:
            raise InvalidInputError("waypoint_count must be at least 1")
        if self.road_efficiency_factor <= 0:
            raise InvalidInputError("road_efficiency_factor must be positive")
        if self.distance_tolerance < 0:
            raise InvalidInputError("distance_tolerance cannot be negative")
        if self.max_attempts < 1:
            raise InvalidInputError("max_attempts must be at least 1")
        if not 0 <= self.radius_jitter < 1:
            raise InvalidInputError("radius_jitter must be in [0, 1)")


@dataclass(frozen=True, slots=True)
class RingShape:
    """Rotation and per-waypoint radius factors of a waypoint ring."""

    rotation: float
    jitter_factors: tuple[float, ...]


def new_seed() -> int:
    """Pick a fresh generation seed from system entropy."""

    return secrets.randbelow(2**31 - 1) + 1


def validate_target_distance(target_distance_km: float) -> None:
    if not math.isfinite(target_distance_km) or not (
        MIN_TARGET_DISTANCE_KM <= target_distance_km <= MAX_TARGET_DISTANCE_KM
    ):
        raise InvalidInputError(
            f"Target distance must be between {MIN_TARGET_DISTANCE_KM} and "
            f"{MAX_TARGET_DISTANCE_KM} km, got {target_distance_km}"
        )


def compute_base_radius_km(
    target_distance_km: float,
    road_efficiency_factor: float = ROAD_EFFICIENCY_FACTOR,
) -> float:
    """Ring radius whose circumference, stretched by street detours, matches the target."""

    effective_circumference_km = target_distance_km / road_efficiency_factor
    return effective_circumference_km / (2 * math.pi)


def draw_ring_shape(
    rng: random.Random, waypoint_count: int, radius_jitter: float
) -> RingShape:
    """Draw a random ring rotation plus one radius factor in ``1 +/- jitter`` per waypoint."""

    rotation = rng.random() * 2 * math.pi
    factors = tuple(
        1 + (rng.random() * 2 - 1) * radius_jitter for _ in range(waypoint_count)
    )
    return RingShape(rotation=rotation, jitter_factors=factors)


def place_ring_waypoints(
    start: GeoPoint, radius_km: float, shape: RingShape
) -> List[Waypoint]:
    """Lay waypoints evenly in angle around ``start``, ordered by angle."""

    scale = degrees_per_km(start.latitude)
    count = len(shape.jitter_factors)
    waypoints: List[Waypoint] = []
    for index, factor in enumerate(shape.jitter_factors):
        angle = shape.rotation + (2 * math.pi * index) / count
        offset_km = radius_km * factor
        latitude = start.latitude + offset_km * scale.lat_deg_per_km * math.sin(angle)
        longitude = start.longitude + offset_km * scale.lng_deg_per_km * math.cos(angle)
        waypoints.append(
            Waypoint(
                id=f"loop_wp_{index}",
                location=GeoPoint(latitude, _wrap_longitude(longitude)),
                order=index,
            )
        )
    return waypoints


def _wrap_longitude(longitude: float) -> float:
    if -180.0 <= longitude <= 180.0:
        return longitude
    return ((longitude + 180.0) % 360.0) - 180.0


class LoopRouteGenerator:
    """Search for a loop near a target distance using a directions provider."""

    def __init__(
        self,
        provider: DirectionsProvider,
        settings: LoopSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.provider = provider
        self.settings = settings or LoopSettings()
        self.settings.validate()
        self._log = logger or logging.getLogger(self.__class__.__name__)

    def generate_core(
        self,
        start: GeoPoint,
        target_distance_km: float,
        *,
        seed: Optional[int] = None,
    ) -> GeneratedLoopCore:
        """Run the radius search and return the closest loop found.

        Raises:
            InvalidInputError: target distance outside the supported range.
            RoutingUnavailableError: every provider call failed.
        """

        validate_target_distance(target_distance_km)
        settings = self.settings
        if seed is None:
            seed = new_seed()
        rng = random.Random(seed)  # nosec B311
        base_radius_km = compute_base_radius_km(
            target_distance_km, settings.road_efficiency_factor
        )
        shape = draw_ring_shape(rng, settings.waypoint_count, settings.radius_jitter)
        tolerance_km = target_distance_km * settings.distance_tolerance
        attempt_level = logging.INFO if LOG_GENERATION_ATTEMPTS else logging.DEBUG

        radius_multiplier = 1.0
        best: GeneratedLoopCore | None = None
        last_error: RoutingUnavailableError | None = None
        attempts = 0
        for attempt in range(1, settings.max_attempts + 1):
            attempts = attempt
            waypoints = place_ring_waypoints(
                start, base_radius_km * radius_multiplier, shape
            )
            try:
                path = self.provider.get_path(
                    start, start, [wp.location for wp in waypoints]
                )
                if not path.is_usable:
                    raise RoutingUnavailableError(
                        "Directions provider returned no usable path"
                    )
            except RoutingUnavailableError as exc:
                last_error = exc
                self._log.warning(
                    "Loop attempt %d/%d failed (seed=%d): %s",
                    attempt,
                    settings.max_attempts,
                    seed,
                    exc,
                )
                # Same radius, new bearing: try different streets next time.
                shape = RingShape(
                    rotation=rng.random() * 2 * math.pi,
                    jitter_factors=shape.jitter_factors,
                )
                continue

            distance_km = path.distance_km
            error_km = abs(distance_km - target_distance_km)
            within_tolerance = error_km <= tolerance_km
            self._log.log(
                attempt_level,
                "Loop attempt %d/%d: %.2f km for target %.2f km (radius x%.3f)%s",
                attempt,
                settings.max_attempts,
                distance_km,
                target_distance_km,
                radius_multiplier,
                " within tolerance" if within_tolerance else "",
            )
            if best is None or error_km < abs(best.distance_km - target_distance_km):
                best = GeneratedLoopCore(
                    waypoints=waypoints,
                    polyline=list(path.polyline),
                    distance_km=distance_km,
                    duration_s=path.duration_s,
                    seed=seed,
                    target_distance_km=target_distance_km,
                    attempts=attempt,
                    within_tolerance=within_tolerance,
                )
            if within_tolerance:
                break
            if distance_km > 0:
                radius_multiplier *= target_distance_km / distance_km
            else:
                radius_multiplier *= 1.1

        if best is None:
            message = str(last_error) if last_error else NO_LOOP_FOUND_MESSAGE
            status = last_error.status if last_error else None
            raise RoutingUnavailableError(
                message or NO_LOOP_FOUND_MESSAGE, status=status
            ) from last_error

        best.attempts = attempts
        if not best.within_tolerance:
            self._log.warning(
                "Loop generation settled for %.2f km vs target %.2f km (%+.1f%%) after %d attempts",
                best.distance_km,
                target_distance_km,
                best.distance_error_ratio * 100,
                attempts,
            )
        return best

    def generate(
        self,
        start: GeoPoint,
        target_distance_km: float,
        *,
        seed: Optional[int] = None,
        name: Optional[str] = None,
    ) -> Route:
        """Generate a loop and package it as a :class:`Route` ending at ``start``."""

        core = self.generate_core(start, target_distance_km, seed=seed)
        return Route(
            id=new_id("route"),
            start=start,
            end=start,
            waypoints=core.waypoints,
            polyline=core.polyline,
            distance_km=core.distance_km,
            estimated_duration_s=core.duration_s,
            is_loop=True,
            target_distance_km=target_distance_km,
            name=name,
            seed=core.seed,
            metadata={
                "within_tolerance": core.within_tolerance,
                "generation_attempts": core.attempts,
            },
        )

    def regenerate(self, route: Route, *, seed: Optional[int] = None) -> Route:
        """Generate a fresh loop for an existing loop route's start and target."""

        if not route.is_loop or route.target_distance_km is None:
            raise InvalidInputError(
                "Only loop routes with a target distance can be regenerated"
            )
        return self.generate(
            route.start,
            route.target_distance_km,
            seed=seed if seed is not None else new_seed(),
            name=route.name,
        )


def generate_loop_route(
    provider: DirectionsProvider,
    start: GeoPoint,
    target_distance_km: float,
    *,
    seed: Optional[int] = None,
    settings: LoopSettings | None = None,
) -> Route:
    """One-shot helper around :class:`LoopRouteGenerator`."""

    return LoopRouteGenerator(provider, settings).generate(
        start, target_distance_km, seed=seed
    )


__all__ = [
    "LoopRouteGenerator",
    "LoopSettings",
    "RingShape",
    "compute_base_radius_km",
    "draw_ring_shape",
    "generate_loop_route",
    "new_seed",
    "place_ring_waypoints",
    "validate_target_distance",
]
