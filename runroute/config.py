"""Tunable constants for route generation, simplification and run analysis.

Each numeric setting can be overridden by an environment variable of the same
name, and a `.env` file is honoured when python-dotenv is installed. The Google
Maps key is only ever read from the environment.
"""

from __future__ import annotations

import importlib
import os
from typing import Callable, TypeVar

T = TypeVar("T")

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})

try:
    # Searches the working directory and its parents for a .env file.
    importlib.import_module("dotenv").load_dotenv()
except ImportError:
    pass


def _parse_bool(raw: str) -> bool:
    flag = raw.strip().lower()
    if flag in _TRUTHY:
        return True
    if flag in _FALSY:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _env(key: str, default: T, cast: Callable[[str], T]) -> T:
    """Read ``key`` with ``cast``; unset, blank or unparsable values keep ``default``."""

    raw = os.environ.get(key, "")
    if not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Directions provider (Google Directions API)
# ---------------------------------------------------------------------------
DIRECTIONS_API_URL = "https://maps.googleapis.com/maps/api/directions/json"

# API key pulled from the environment. Do not hardcode secrets.
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")

# Travel mode requested from the provider. Running routes use walking paths.
DIRECTIONS_TRAVEL_MODE = os.getenv("DIRECTIONS_TRAVEL_MODE", "walking")

# Request timeout in seconds.
REQUEST_TIMEOUT = _env("REQUEST_TIMEOUT", 30, int)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Transport-level retries for 5xx responses (urllib3 Retry).
DIRECTIONS_MAX_RETRIES = _env("DIRECTIONS_MAX_RETRIES", 3, int)

# Cache identical directions requests. Set the size to 0 to disable.
DIRECTIONS_CACHE_SIZE = _env("DIRECTIONS_CACHE_SIZE", 128, int)
DIRECTIONS_CACHE_TTL_SECONDS = _env("DIRECTIONS_CACHE_TTL_SECONDS", 600, int)


# ---------------------------------------------------------------------------
# Loop generation
# ---------------------------------------------------------------------------
# Waypoints placed on the ring around the start. More points give a smoother loop.
LOOP_WAYPOINT_COUNT = _env("LOOP_WAYPOINT_COUNT", 6, int)

# Real paths are roughly this much longer than the idealised circle.
ROAD_EFFICIENCY_FACTOR = _env("ROAD_EFFICIENCY_FACTOR", 1.3, float)

# Accept a generated loop within this fraction of the target distance.
LOOP_DISTANCE_TOLERANCE = _env("LOOP_DISTANCE_TOLERANCE", 0.10, float)

# Directions calls made per loop generation before settling for the best one.
MAX_GENERATION_ATTEMPTS = _env("MAX_GENERATION_ATTEMPTS", 4, int)

# Per-waypoint radius variation as a fraction of the ring radius.
LOOP_RADIUS_JITTER = _env("LOOP_RADIUS_JITTER", 0.2, float)

# Accepted target distance range (km).
MIN_TARGET_DISTANCE_KM = _env("MIN_TARGET_DISTANCE_KM", 0.1, float)
MAX_TARGET_DISTANCE_KM = _env("MAX_TARGET_DISTANCE_KM", 100.0, float)


# ---------------------------------------------------------------------------
# Route editing
# ---------------------------------------------------------------------------
# Upper bound on user placed waypoints per route.
MAX_WAYPOINTS = _env("MAX_WAYPOINTS", 20, int)


# ---------------------------------------------------------------------------
# Polyline simplification
# ---------------------------------------------------------------------------
# Maximum deviation (km) when simplifying a run before it is saved as a route.
SIMPLIFY_SAVE_TOLERANCE_KM = _env("SIMPLIFY_SAVE_TOLERANCE_KM", 0.00005, float)

# Looser tolerance (km) for feed and preview thumbnails.
SIMPLIFY_PREVIEW_TOLERANCE_KM = _env("SIMPLIFY_PREVIEW_TOLERANCE_KM", 0.0002, float)

# Hard cap on simplified point count. Tolerance doubles until the output fits.
SIMPLIFY_MAX_POINTS = _env("SIMPLIFY_MAX_POINTS", 500, int)


# ---------------------------------------------------------------------------
# Run analysis
# ---------------------------------------------------------------------------
# Start/end separation (km) under which a trail counts as a loop.
LOOP_DETECTION_THRESHOLD_KM = _env("LOOP_DETECTION_THRESHOLD_KM", 0.1, float)

# Per-point tolerance (km) and sample size for duplicate route detection.
POLYLINE_MATCH_TOLERANCE_KM = _env("POLYLINE_MATCH_TOLERANCE_KM", 0.05, float)
POLYLINE_MATCH_POINTS = _env("POLYLINE_MATCH_POINTS", 10, int)

# Trailing distance (km) needed before a partial interval is reported.
INTERVAL_MIN_PARTIAL_KM = _env("INTERVAL_MIN_PARTIAL_KM", 0.1, float)

# Log every directions attempt at INFO instead of DEBUG.
LOG_GENERATION_ATTEMPTS = _env("LOG_GENERATION_ATTEMPTS", False, _parse_bool)
