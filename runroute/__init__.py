"""RunRoute route geometry core."""

from .analysis import (
    compute_intervals,
    convert_run_to_route,
    is_duplicate_route,
    is_loop,
    polylines_equal,
    summarize_run,
)
from .errors import InvalidInputError, RoutingUnavailableError, RunRouteError
from .models import (
    DirectionsPath,
    GeneratedLoopCore,
    GeoPoint,
    PaceInterval,
    PathSegment,
    Route,
    Run,
    RunSummary,
    Waypoint,
)
from .planning import LoopRouteGenerator, LoopSettings, assemble_route

__all__ = [
    "DirectionsPath",
    "GeneratedLoopCore",
    "GeoPoint",
    "InvalidInputError",
    "LoopRouteGenerator",
    "LoopSettings",
    "PaceInterval",
    "PathSegment",
    "Route",
    "Run",
    "RunRouteError",
    "RunSummary",
    "RoutingUnavailableError",
    "Waypoint",
    "assemble_route",
    "compute_intervals",
    "convert_run_to_route",
    "is_duplicate_route",
    "is_loop",
    "polylines_equal",
    "summarize_run",
]
