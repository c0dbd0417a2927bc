"""Geometry primitives and polyline simplification."""

from .primitives import (
    DegreesPerKm,
    degrees_per_km,
    haversine_distance_km,
    path_length_km,
    perpendicular_distance_km,
    segment_lengths_km,
)
from .simplify import (
    SimplificationResult,
    douglas_peucker,
    simplify_for_preview,
    simplify_polyline,
    simplify_with_budget,
)

__all__ = [
    "DegreesPerKm",
    "degrees_per_km",
    "haversine_distance_km",
    "path_length_km",
    "perpendicular_distance_km",
    "segment_lengths_km",
    "SimplificationResult",
    "douglas_peucker",
    "simplify_for_preview",
    "simplify_polyline",
    "simplify_with_budget",
]
