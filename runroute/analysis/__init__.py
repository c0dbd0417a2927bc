"""Completed-run analysis and run-to-route conversion."""

from .converter import convert_run_to_route, generate_route_name  # noqa: F401
from .run_analyzer import (  # noqa: F401
    compute_intervals,
    is_duplicate_route,
    is_loop,
    polylines_equal,
    summarize_run,
    total_distance_km,
)
