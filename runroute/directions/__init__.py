"""Directions provider contract and the Google Directions client."""

from .base import DirectionsProvider  # noqa: F401
from .google import (  # noqa: F401
    GoogleDirectionsClient,
    decode_polyline,
    parse_directions_payload,
)
from .session import create_default_session, get_default_session  # noqa: F401
