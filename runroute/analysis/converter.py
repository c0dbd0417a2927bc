"""Turn completed runs into saveable routes."""

from __future__ import annotations

import logging
from typing import Literal

from ..errors import InvalidInputError
from ..geometry.simplify import simplify_polyline
from ..models import Route, Run, new_id
from ..units import KM_TO_MILES, DistanceUnit
from .run_analyzer import is_loop

LOGGER = logging.getLogger(__name__)

SourceType = Literal["own_run", "social_post", "manual"]
SOURCE_TYPES = ("own_run", "social_post", "manual")

_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def generate_route_name(run: Run, unit: DistanceUnit = "km") -> str:
    """Suggest a name such as ``5.2km Loop - Mar 4``."""

    if unit == "miles":
        distance = f"{run.distance_km * KM_TO_MILES:.1f}mi"
    else:
        distance = f"{run.distance_km:.1f}km"
    kind = "Loop" if is_loop(run.polyline) else "Route"
    when = f"{_MONTHS[run.start_time.month - 1]} {run.start_time.day}"
    return f"{distance} {kind} - {when}"


def convert_run_to_route(
    run: Run,
    name: str,
    source_type: SourceType,
    is_community: bool = False,
) -> Route:
    """Build a waypoint-free route from a run's simplified trail."""

    if source_type not in SOURCE_TYPES:
        raise InvalidInputError(f"Unknown route source type: {source_type}")
    if len(run.polyline) < 2:
        raise InvalidInputError("A run needs at least two points to become a route")

    simplified = [point.location_only() for point in simplify_polyline(run.polyline)]
    start = simplified[0]
    looped = is_loop(simplified)
    # Close detected loops exactly so the route keeps start == end.
    end = start if looped else simplified[-1]
    LOGGER.debug(
        "Converted run %s: %d -> %d points, loop=%s",
        run.id,
        len(run.polyline),
        len(simplified),
        looped,
    )
    return Route(
        id=new_id("route"),
        start=start,
        end=end,
        waypoints=[],
        polyline=simplified,
        distance_km=run.distance_km,
        estimated_duration_s=run.duration_s,
        is_loop=looped,
        name=name,
        metadata={
            "source_type": source_type,
            "is_community_route": is_community,
            "original_run_id": run.id,
            "user_id": run.user_id,
        },
    )


__all__ = [
    "SOURCE_TYPES",
    "SourceType",
    "convert_run_to_route",
    "generate_route_name",
]
