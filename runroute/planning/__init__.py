"""Loop generation and point-to-point route assembly."""

from .assembler import (  # noqa: F401
    assemble_route,
    insert_waypoint,
    insertion_order,
    move_waypoint,
    ordered_waypoints,
    remove_waypoint,
    reroute_with_waypoints,
    snap_to_polyline,
)
from .loop_generator import (  # noqa: F401
    LoopRouteGenerator,
    LoopSettings,
    generate_loop_route,
)
