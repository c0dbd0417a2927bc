#!/usr/bin/env python3
"""Generate a running loop around a start point using Google Directions.

Environment requirements:
- ``GOOGLE_MAPS_API_KEY`` must be set (or stored in ``.env``) with the
  Directions API enabled.

Usage examples:

    # 5 km loop, GPX written to data/routes/loop_<seed>.gpx
    python -m runroute.tools.generate_loop --lat 51.5007 --lng -0.1246 \
        --distance-km 5

    # Reproduce a previous loop and print it as JSON
    python -m runroute.tools.generate_loop --lat 51.5007 --lng -0.1246 \
        --distance-km 5 --seed 424242 --output-format json --no-file
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

from ..directions.google import GoogleDirectionsClient
from ..errors import InvalidInputError, RoutingUnavailableError
from ..models import GeoPoint, Route
from ..planning.loop_generator import LoopRouteGenerator
from ..units import format_duration
from ._gpx import route_to_gpx

DEFAULT_OUTPUT_DIR = Path.cwd() / "data" / "routes"

LOGGER = logging.getLogger("generate_loop")


def route_to_dict(route: Route) -> Dict[str, Any]:
    """JSON-friendly view of a route."""

    return {
        "id": route.id,
        "name": route.name,
        "seed": route.seed,
        "is_loop": route.is_loop,
        "distance_km": round(route.distance_km, 3),
        "target_distance_km": route.target_distance_km,
        "estimated_duration_s": route.estimated_duration_s,
        "start": [route.start.latitude, route.start.longitude],
        "waypoints": [
            {"id": wp.id, "order": wp.order, "lat": wp.latitude, "lng": wp.longitude}
            for wp in route.ordered_waypoints()
        ],
        "polyline": [[p.latitude, p.longitude] for p in route.polyline],
        "metadata": dict(route.metadata),
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a loop route of roughly the requested distance"
    )
    parser.add_argument("--lat", type=float, required=True, help="Start latitude")
    parser.add_argument("--lng", type=float, required=True, help="Start longitude")
    parser.add_argument(
        "--distance-km",
        type=float,
        required=True,
        help="Target loop distance in kilometres",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for a reproducible loop shape (random when omitted)",
    )
    parser.add_argument("--name", help="Optional route name")
    parser.add_argument(
        "--output-format",
        choices=["json", "gpx"],
        default="gpx",
        help="Output format (default: gpx)",
    )
    parser.add_argument(
        "--output-file",
        type=Path,
        help="Output file path (default: data/routes/loop_<seed>.<format>)",
    )
    parser.add_argument(
        "--no-file",
        action="store_true",
        help="Print to stdout instead of writing to file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the generate_loop tool."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    try:
        start = GeoPoint(args.lat, args.lng)
        generator = LoopRouteGenerator(GoogleDirectionsClient())
        route = generator.generate(
            start, args.distance_km, seed=args.seed, name=args.name
        )
    except InvalidInputError as exc:
        LOGGER.error("Invalid input: %s", exc)
        return 2
    except RoutingUnavailableError as exc:
        LOGGER.error("Routing unavailable (%s): %s", exc.status or "no status", exc)
        return 1

    LOGGER.info(
        "Loop %.2f km (target %.2f km, ~%s) seed=%s",
        route.distance_km,
        args.distance_km,
        format_duration(route.estimated_duration_s),
        route.seed,
    )

    if args.output_format == "gpx":
        output = route_to_gpx(route)
    else:
        output = json.dumps(route_to_dict(route), indent=2)

    if args.no_file:
        print(output)
        return 0

    output_path = args.output_file or (
        DEFAULT_OUTPUT_DIR / f"loop_{route.seed}.{args.output_format}"
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding="utf-8")
    LOGGER.info("Route written to %s", output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
