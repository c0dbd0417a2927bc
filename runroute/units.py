"""Conversion and display helpers for metric and imperial users."""

from __future__ import annotations

from typing import Literal

DistanceUnit = Literal["km", "miles"]

KM_TO_MILES = 0.621371
MILES_TO_KM = 1.60934
METERS_TO_FEET = 3.28084


def interval_distance_km(unit: DistanceUnit) -> float:
    """Split length in kilometres: one kilometre or one mile."""
    return MILES_TO_KM if unit == "miles" else 1.0


def convert_distance(km: float, unit: DistanceUnit) -> float:
    return km * KM_TO_MILES if unit == "miles" else km


def convert_miles_to_km(miles: float) -> float:
    return miles * MILES_TO_KM


def unit_label(unit: DistanceUnit, short: bool = True, plural: bool = False) -> str:
    if short:
        return "km" if unit == "km" else "mi"
    if unit == "km":
        return "kilometers" if plural else "kilometer"
    return "miles" if plural else "mile"


def format_distance(km: float, unit: DistanceUnit, decimals: int = 2) -> str:
    return f"{convert_distance(km, unit):.{decimals}f} {unit_label(unit)}"


def convert_pace_to_unit(seconds_per_km: float, unit: DistanceUnit) -> float:
    return seconds_per_km * MILES_TO_KM if unit == "miles" else seconds_per_km


def format_pace(seconds_per_km: float, unit: DistanceUnit) -> str:
    """Format a pace as ``m:ss /km`` or ``m:ss /mi``."""

    pace = convert_pace_to_unit(seconds_per_km, unit)
    minutes = int(pace // 60)
    seconds = int(pace % 60)
    return f"{minutes}:{seconds:02d} /{unit_label(unit)}"


def convert_speed(kmh: float, unit: DistanceUnit) -> float:
    return kmh * KM_TO_MILES if unit == "miles" else kmh


def format_speed(kmh: float, unit: DistanceUnit, decimals: int = 1) -> str:
    label = "mph" if unit == "miles" else "km/h"
    return f"{convert_speed(kmh, unit):.{decimals}f} {label}"


def convert_meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def format_elevation(meters: float, unit: DistanceUnit, decimals: int = 0) -> str:
    """Metres for metric users, feet for imperial ones."""

    if unit == "miles":
        return f"{convert_meters_to_feet(meters):.{decimals}f} ft"
    return f"{meters:.{decimals}f} m"


def format_duration(seconds: float) -> str:
    """Format a duration as ``1h 5m`` or ``42m``."""

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


__all__ = [
    "DistanceUnit",
    "KM_TO_MILES",
    "METERS_TO_FEET",
    "MILES_TO_KM",
    "convert_distance",
    "convert_meters_to_feet",
    "convert_miles_to_km",
    "convert_pace_to_unit",
    "convert_speed",
    "format_distance",
    "format_duration",
    "format_elevation",
    "format_pace",
    "format_speed",
    "interval_distance_km",
    "unit_label",
]
