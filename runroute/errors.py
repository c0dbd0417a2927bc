"""Central error types used across the application."""

from __future__ import annotations


class RunRouteError(RuntimeError):
    """Base error for route planning and analysis failures."""


class InvalidInputError(RunRouteError, ValueError):
    """Raised for malformed coordinates, out-of-range targets, or short trails."""


class RoutingUnavailableError(RunRouteError):
    """Raised when the directions provider cannot supply a usable path."""

    def __init__(self, message: str, *, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


__all__ = [
    "RunRouteError",
    "InvalidInputError",
    "RoutingUnavailableError",
]
