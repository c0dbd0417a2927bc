"""Point-to-point route assembly and waypoint editing."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from ..config import MAX_WAYPOINTS
from ..directions.base import DirectionsProvider
from ..errors import InvalidInputError, RoutingUnavailableError
from ..models import GeoPoint, Route, Waypoint, check_waypoint_orders, new_id

LOGGER = logging.getLogger(__name__)


def ordered_waypoints(waypoints: Sequence[Waypoint]) -> List[Waypoint]:
    """Return ``waypoints`` sorted by ``order`` after validating the sequence."""

    check_waypoint_orders(waypoints)
    return sorted(waypoints, key=lambda wp: wp.order)


def assemble_route(
    provider: DirectionsProvider,
    start: GeoPoint,
    end: GeoPoint,
    waypoints: Sequence[Waypoint] = (),
    *,
    target_distance_km: Optional[float] = None,
    name: Optional[str] = None,
) -> Route:
    """Route ``start -> waypoints -> end`` with a single provider call.

    Waypoints are visited strictly by ``order``; nothing is added or
    reordered. Provider failures propagate as
    :class:`~runroute.errors.RoutingUnavailableError`.
    """

    visit = ordered_waypoints(waypoints)
    path = provider.get_path(start, end, [wp.location for wp in visit])
    if not path.is_usable:
        raise RoutingUnavailableError("Directions provider returned no usable path")
    LOGGER.debug(
        "Assembled route through %d waypoints: %.2f km, %d s",
        len(visit),
        path.distance_km,
        path.duration_s,
    )
    return Route(
        id=new_id("route"),
        start=start,
        end=end,
        waypoints=visit,
        polyline=list(path.polyline),
        distance_km=path.distance_km,
        estimated_duration_s=path.duration_s,
        is_loop=False,
        target_distance_km=target_distance_km,
        name=name,
    )


def reroute_with_waypoints(
    provider: DirectionsProvider, route: Route, waypoints: Sequence[Waypoint]
) -> Route:
    """Re-run the provider for ``route`` after its waypoints were edited."""

    visit = ordered_waypoints(waypoints)
    path = provider.get_path(route.start, route.end, [wp.location for wp in visit])
    if not path.is_usable:
        raise RoutingUnavailableError("Directions provider returned no usable path")
    return Route(
        id=route.id,
        start=route.start,
        end=route.end,
        waypoints=visit,
        polyline=list(path.polyline),
        distance_km=path.distance_km,
        estimated_duration_s=path.duration_s,
        is_loop=route.is_loop,
        target_distance_km=route.target_distance_km,
        name=route.name,
        seed=route.seed,
        metadata=dict(route.metadata),
    )


def _nearest_index(polyline: Sequence[GeoPoint], point: GeoPoint) -> int:
    # Planar squared degrees; only the ranking matters here.
    best_index = 0
    best_dist = float("inf")
    for index, candidate in enumerate(polyline):
        d_lat = candidate.latitude - point.latitude
        d_lng = candidate.longitude - point.longitude
        dist = d_lat * d_lat + d_lng * d_lng
        if dist < best_dist:
            best_dist = dist
            best_index = index
    return best_index


def snap_to_polyline(
    polyline: Sequence[GeoPoint], point: GeoPoint
) -> Tuple[int, GeoPoint]:
    """Return the index and location of the polyline sample nearest ``point``."""

    if not polyline:
        raise InvalidInputError("Cannot snap to an empty polyline")
    index = _nearest_index(polyline, point)
    return index, polyline[index].location_only()


def insertion_order(
    polyline: Sequence[GeoPoint], waypoints: Sequence[Waypoint], new_point: GeoPoint
) -> int:
    """Order a new waypoint should take so the route keeps following ``polyline``.

    Counts the existing waypoints that sit earlier along the polyline than
    ``new_point``. With no polyline the new waypoint goes last.
    """

    if not polyline:
        return len(waypoints)
    new_index = _nearest_index(polyline, new_point)
    return sum(
        1 for wp in waypoints if _nearest_index(polyline, wp.location) < new_index
    )


def insert_waypoint(
    waypoints: Sequence[Waypoint],
    location: GeoPoint,
    order: Optional[int] = None,
) -> List[Waypoint]:
    """Return a new list with a waypoint at ``order`` (appended by default)."""

    current = ordered_waypoints(waypoints)
    if len(current) >= MAX_WAYPOINTS:
        raise InvalidInputError(f"Routes support at most {MAX_WAYPOINTS} waypoints")
    if order is None:
        order = len(current)
    if not 0 <= order <= len(current):
        raise InvalidInputError(
            f"Waypoint order must be between 0 and {len(current)}, got {order}"
        )
    shifted = [
        Waypoint(wp.id, wp.location, wp.order + 1) if wp.order >= order else wp
        for wp in current
    ]
    shifted.append(Waypoint(new_id("waypoint"), location.location_only(), order))
    return sorted(shifted, key=lambda wp: wp.order)


def move_waypoint(
    waypoints: Sequence[Waypoint], waypoint_id: str, location: GeoPoint
) -> List[Waypoint]:
    """Return a new list with ``waypoint_id`` relocated; orders are unchanged."""

    current = ordered_waypoints(waypoints)
    _require_waypoint(current, waypoint_id)
    return [
        Waypoint(wp.id, location.location_only(), wp.order)
        if wp.id == waypoint_id
        else wp
        for wp in current
    ]


def remove_waypoint(waypoints: Sequence[Waypoint], waypoint_id: str) -> List[Waypoint]:
    """Return a new list without ``waypoint_id``, renumbered from zero."""

    current = ordered_waypoints(waypoints)
    _require_waypoint(current, waypoint_id)
    remaining = [wp for wp in current if wp.id != waypoint_id]
    return [Waypoint(wp.id, wp.location, index) for index, wp in enumerate(remaining)]


def _require_waypoint(waypoints: Sequence[Waypoint], waypoint_id: str) -> None:
    if not any(wp.id == waypoint_id for wp in waypoints):
        raise InvalidInputError(f"Unknown waypoint id: {waypoint_id}")


__all__ = [
    "assemble_route",
    "insert_waypoint",
    "insertion_order",
    "move_waypoint",
    "ordered_waypoints",
    "remove_waypoint",
    "reroute_with_waypoints",
    "snap_to_polyline",
]
