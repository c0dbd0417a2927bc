#!/usr/bin/env python3
"""Analyse a recorded GPS trail and print a JSON report.

The trail may be a GPX file (track or route points) or a JSON document that
is either a list of points or an object with a ``points`` list. JSON points
accept ``latitude``/``longitude`` (or ``lat``/``lng``), optional ``altitude``
and either ``timestamp_ms`` or an ISO ``time``.

Usage examples:

    python -m runroute.tools.analyze_trail --input morning_run.gpx

    # Mile splits, report written to disk
    python -m runroute.tools.analyze_trail \
        --input morning_run.json \
        --unit miles \
        --output-file report.json
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..analysis.run_analyzer import (
    compute_intervals,
    is_loop,
    summarize_run,
    total_distance_km,
)
from ..errors import InvalidInputError
from ..geometry.simplify import simplify_with_budget
from ..models import GeoPoint
from ..units import (
    DistanceUnit,
    format_duration,
    format_pace,
    interval_distance_km,
)
from ._gpx import parse_iso8601, read_gpx_trail

LOGGER = logging.getLogger("analyze_trail")


def _number(raw: Dict[str, Any], value: Any, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Trail point has a non-numeric {field}: {raw}") from exc


def _point_from_json(raw: Any) -> GeoPoint:
    if not isinstance(raw, dict):
        raise InvalidInputError(f"Trail point must be an object, got {raw!r}")
    lat = raw.get("latitude", raw.get("lat"))
    lng = raw.get("longitude", raw.get("lng", raw.get("lon")))
    if lat is None or lng is None:
        raise InvalidInputError(f"Trail point is missing coordinates: {raw}")
    timestamp_ms = raw.get("timestamp_ms")
    if timestamp_ms is None and raw.get("time"):
        timestamp_ms = parse_iso8601(str(raw["time"])).timestamp() * 1000.0
    altitude = raw.get("altitude")
    return GeoPoint(
        latitude=_number(raw, lat, "latitude"),
        longitude=_number(raw, lng, "longitude"),
        altitude=_number(raw, altitude, "altitude") if altitude is not None else None,
        timestamp_ms=(
            _number(raw, timestamp_ms, "timestamp_ms") if timestamp_ms is not None else None
        ),
    )


def read_json_trail(path: Path) -> List[GeoPoint]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = payload.get("points", [])
    if not isinstance(payload, list):
        raise InvalidInputError(f"{path} does not contain a list of points")
    return [_point_from_json(item) for item in payload]


def load_trail(path: Path) -> List[GeoPoint]:
    if path.suffix.lower() == ".gpx":
        return read_gpx_trail(path)
    return read_json_trail(path)


def build_report(
    trail: Sequence[GeoPoint], unit: DistanceUnit = "km"
) -> Dict[str, Any]:
    """Collect distance, loop flag, simplification and split details."""

    simplified = simplify_with_budget(trail)
    report: Dict[str, Any] = {
        "points": len(trail),
        "distance_km": round(total_distance_km(trail), 3),
        "is_loop": is_loop(trail),
        "simplified_points": len(simplified.points),
        "simplify_tolerance_km": simplified.tolerance_km,
    }
    timed = len(trail) >= 2 and all(p.timestamp_ms is not None for p in trail)
    if not timed:
        LOGGER.warning("Trail has no complete timestamps; skipping splits")
        return report

    summary = summarize_run(trail)
    report["summary"] = {
        "duration_s": summary.duration_s,
        "duration": format_duration(summary.duration_s),
        "average_pace": format_pace(summary.average_pace_s_per_km, unit),
        "average_speed_kmh": round(summary.average_speed_kmh, 2),
        "elevation_gain_m": round(summary.elevation_gain_m, 1),
    }
    intervals = compute_intervals(trail, interval_distance_km(unit))
    report["intervals"] = [
        {
            "distance_km": round(interval.distance_km, 3),
            "duration_s": interval.duration_s,
            "pace": format_pace(interval.pace_s_per_km, unit),
            "elevation_gain_m": (
                round(interval.elevation_gain_m, 1)
                if interval.elevation_gain_m is not None
                else None
            ),
        }
        for interval in intervals
    ]
    return report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report distance, loop detection and splits for a GPS trail"
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="GPX or JSON trail file",
    )
    parser.add_argument(
        "--unit",
        choices=["km", "miles"],
        default="km",
        help="Split length and pace unit (default: km)",
    )
    parser.add_argument(
        "--output-file",
        type=Path,
        help="Write the JSON report here instead of stdout",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the analyze_trail tool."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    try:
        trail = load_trail(args.input)
        report = build_report(trail, args.unit)
    except (InvalidInputError, OSError, json.JSONDecodeError) as exc:
        LOGGER.error("Could not analyse %s: %s", args.input, exc)
        return 1

    output = json.dumps(report, indent=2)
    if args.output_file:
        args.output_file.parent.mkdir(parents=True, exist_ok=True)
        args.output_file.write_text(output, encoding="utf-8")
        LOGGER.info("Report written to %s", args.output_file)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
