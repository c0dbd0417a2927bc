"""GPX reading and writing shared by the command line tools."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import List, Optional
from xml.sax.saxutils import escape

from defusedxml import ElementTree as ET

from ..errors import InvalidInputError
from ..models import GeoPoint, Route

LOGGER = logging.getLogger(__name__)

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def parse_iso8601(value: str) -> datetime:
    """Parse ISO timestamps, treating a trailing Z or a missing offset as UTC."""

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    child = element.find(f"{{*}}{name}")
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def read_gpx_trail(path: Path) -> List[GeoPoint]:
    """Load track points (or route points when no track exists) from a GPX file."""

    try:
        tree = ET.parse(path)
    except ET.ParseError as exc:
        raise InvalidInputError(f"{path} is not valid GPX: {exc}") from exc
    root = tree.getroot()
    elements = root.findall(".//{*}trkpt") or root.findall(".//{*}rtept")
    if not elements:
        raise InvalidInputError(f"{path} contains no track or route points")

    trail: List[GeoPoint] = []
    for element in elements:
        ele = _child_text(element, "ele")
        try:
            lat = float(element.attrib["lat"])
            lon = float(element.attrib["lon"])
            altitude = float(ele) if ele is not None else None
        except (KeyError, ValueError) as exc:
            raise InvalidInputError(
                f"Bad GPX point {element.attrib} (ele={ele!r}) in {path}"
            ) from exc
        time_text = _child_text(element, "time")
        timestamp_ms = None
        if time_text is not None:
            timestamp_ms = parse_iso8601(time_text).timestamp() * 1000.0
        trail.append(
            GeoPoint(
                latitude=lat,
                longitude=lon,
                altitude=altitude,
                timestamp_ms=timestamp_ms,
            )
        )
    LOGGER.debug("Read %d points from %s", len(trail), path)
    return trail


def route_to_gpx(route: Route) -> str:
    """Render a route as GPX 1.1 with its waypoints and path."""

    name = escape(route.name or route.id, _QUOTE_ENTITIES)
    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="runroute"',
        '     xmlns="http://www.topografix.com/GPX/1/1"',
        '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
        '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 '
        'http://www.topografix.com/GPX/1/1/gpx.xsd">',
        "  <metadata>",
        f"    <name>{name}</name>",
        f"    <desc>{route.distance_km:.2f} km{' loop' if route.is_loop else ''}</desc>",
        "  </metadata>",
    ]
    for waypoint in route.ordered_waypoints():
        gpx_lines.append(
            f'  <wpt lat="{waypoint.latitude}" lon="{waypoint.longitude}">'
            f"<name>{escape(waypoint.id, _QUOTE_ENTITIES)}</name></wpt>"
        )
    gpx_lines.extend(["  <trk>", f"    <name>{name}</name>", "    <trkseg>"])
    for point in route.polyline:
        gpx_lines.append(f'      <trkpt lat="{point.latitude}" lon="{point.longitude}">')
        if point.altitude is not None:
            gpx_lines.append(f"        <ele>{point.altitude}</ele>")
        gpx_lines.append("      </trkpt>")
    gpx_lines.extend(["    </trkseg>", "  </trk>", "</gpx>"])
    return "\n".join(gpx_lines)


__all__ = ["parse_iso8601", "read_gpx_trail", "route_to_gpx"]
