"""Google Directions API client implementing :class:`DirectionsProvider`."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cachetools import TTLCache
from polyline import decode as polyline_decode
import requests
from requests import Session
from requests.exceptions import JSONDecodeError as RequestsJSONDecodeError

from ..config import (
    DIRECTIONS_API_URL,
    DIRECTIONS_CACHE_SIZE,
    DIRECTIONS_CACHE_TTL_SECONDS,
    DIRECTIONS_TRAVEL_MODE,
    GOOGLE_MAPS_API_KEY,
    REQUEST_TIMEOUT,
)
from ..errors import RoutingUnavailableError
from ..models import DirectionsPath, GeoPoint, PathSegment
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

_STATUS_HINTS = {
    "REQUEST_DENIED": "Check the API key is valid and the Directions API is enabled",
    "OVER_QUERY_LIMIT": "API quota exceeded or billing not enabled",
    "ZERO_RESULTS": "No route possible between these locations",
    "INVALID_REQUEST": "Invalid request parameters",
    "MAX_WAYPOINTS_EXCEEDED": "Too many waypoints for a single request",
}

_CacheKey = Tuple[str, Tuple[Tuple[float, float], ...]]


def format_latlng(point: GeoPoint) -> str:
    return f"{point.latitude},{point.longitude}"


class GoogleDirectionsClient:
    """Fetch walking paths from the Google Directions JSON API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        session: Optional[Session] = None,
        base_url: str = DIRECTIONS_API_URL,
        mode: str = DIRECTIONS_TRAVEL_MODE,
        timeout: float = REQUEST_TIMEOUT,
        cache_size: int = DIRECTIONS_CACHE_SIZE,
        cache_ttl_s: int = DIRECTIONS_CACHE_TTL_SECONDS,
    ) -> None:
        self._api_key = api_key if api_key is not None else GOOGLE_MAPS_API_KEY
        self._session = session or get_default_session()
        self._base_url = base_url
        self._mode = mode
        self._timeout = timeout
        self._cache: Optional[TTLCache[_CacheKey, DirectionsPath]] = None
        if cache_size > 0:
            self._cache = TTLCache(maxsize=cache_size, ttl=max(1, cache_ttl_s))
        self._cache_lock = RLock()
        if not self._api_key:
            LOGGER.warning(
                "Google Maps API key is not configured; set GOOGLE_MAPS_API_KEY"
            )

    def get_path(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Optional[Sequence[GeoPoint]] = None,
    ) -> DirectionsPath:
        """Return the provider path from ``origin`` through ``waypoints`` to ``destination``."""

        via = list(waypoints or [])
        key = self._cache_key(origin, destination, via)
        if self._cache is not None:
            with self._cache_lock:
                cached = self._cache.get(key)
            if cached is not None:
                LOGGER.debug("Directions cache hit (%d waypoints)", len(via))
                return cached

        payload = self._request(origin, destination, via)
        path = parse_directions_payload(payload)
        if self._cache is not None:
            with self._cache_lock:
                self._cache[key] = path
        return path

    def clear_cache(self) -> None:
        if self._cache is not None:
            with self._cache_lock:
                self._cache.clear()

    def _request(
        self, origin: GeoPoint, destination: GeoPoint, via: List[GeoPoint]
    ) -> Dict[str, Any]:
        if not self._api_key:
            raise RoutingUnavailableError(
                "Google Maps API key is not configured", status="REQUEST_DENIED"
            )
        params: Dict[str, Any] = {
            "origin": format_latlng(origin),
            "destination": format_latlng(destination),
            "mode": self._mode,
            "key": self._api_key,
        }
        if via:
            params["waypoints"] = "|".join(format_latlng(p) for p in via)
        LOGGER.debug(
            "GET %s origin=%s destination=%s waypoints=%d",
            self._base_url,
            params["origin"],
            params["destination"],
            len(via),
        )
        try:
            response = self._session.get(
                self._base_url, params=params, timeout=self._timeout
            )
        except requests.RequestException as exc:
            LOGGER.warning("Directions request failed: %s", exc)
            raise RoutingUnavailableError(
                f"Failed to get directions: {exc}"
            ) from exc

        data = _safe_json(response)
        if response.status_code >= 400:
            detail = None
            if isinstance(data, dict):
                detail = data.get("error_message")
            message = detail or _extract_error_text(response)
            message = message or f"Directions request failed (HTTP {response.status_code})"
            LOGGER.error("Directions HTTP %s: %s", response.status_code, message)
            raise RoutingUnavailableError(message, status=str(response.status_code))
        if not isinstance(data, dict):
            raise RoutingUnavailableError("Directions response was not a JSON object")
        return data

    @staticmethod
    def _cache_key(
        origin: GeoPoint, destination: GeoPoint, via: Sequence[GeoPoint]
    ) -> _CacheKey:
        coords = tuple(
            (round(p.latitude, 6), round(p.longitude, 6))
            for p in (origin, *via, destination)
        )
        return ("path", coords)


def parse_directions_payload(payload: Dict[str, Any]) -> DirectionsPath:
    """Convert a Directions API JSON body into a :class:`DirectionsPath`."""

    status = payload.get("status")
    if status != "OK":
        message = payload.get("error_message") or f"Google API returned status: {status}"
        LOGGER.warning(
            "Directions status %s: %s (%s)",
            status,
            message,
            _STATUS_HINTS.get(str(status), "Unknown error"),
        )
        raise RoutingUnavailableError(message, status=str(status))

    routes = payload.get("routes") or []
    if not routes:
        raise RoutingUnavailableError(
            "No routes found for the given locations", status="ZERO_RESULTS"
        )
    route = routes[0]
    encoded = (route.get("overview_polyline") or {}).get("points", "")
    polyline = decode_polyline(encoded)
    segments = [
        PathSegment(
            distance_km=float(leg["distance"]["value"]) / 1000.0,
            duration_s=int(leg["duration"]["value"]),
        )
        for leg in route.get("legs", [])
    ]
    path = DirectionsPath(polyline=polyline, segments=segments)
    if not path.is_usable:
        raise RoutingUnavailableError(
            "Directions response contained no usable path", status=str(status)
        )
    return path


def decode_polyline(encoded: str) -> List[GeoPoint]:
    """Decode an encoded polyline string into points."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded)
    except (ValueError, TypeError, IndexError) as exc:
        raise RoutingUnavailableError("Unable to decode route polyline") from exc
    return [GeoPoint(float(lat), float(lng)) for lat, lng in decoded]


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except (ValueError, RequestsJSONDecodeError) as exc:
        LOGGER.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


__all__ = [
    "GoogleDirectionsClient",
    "decode_polyline",
    "format_latlng",
    "parse_directions_payload",
]
