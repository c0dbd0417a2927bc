"""Contract between the planning core and a directions provider."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..models import DirectionsPath, GeoPoint


class DirectionsProvider(Protocol):
    """Anything that can route through an ordered list of points.

    Implementations visit ``waypoints`` in the given order (no reordering or
    optimisation) and raise :class:`~runroute.errors.RoutingUnavailableError`
    when no usable path exists.
    """

    def get_path(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Optional[Sequence[GeoPoint]] = None,
    ) -> DirectionsPath: ...


__all__ = ["DirectionsProvider"]
