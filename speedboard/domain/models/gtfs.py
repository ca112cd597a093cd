from __future__ import annotations

from dataclasses import dataclass, field

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class GtfsRoute:
    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    color: str | None = None  # hex without '#'
    text_color: str | None = None  # hex without '#'


@dataclass(frozen=True, slots=True)
class GtfsStaticData:
    """Subset of a static GTFS feed needed to label routes and draw them."""

    routes_by_id: dict[str, GtfsRoute] = field(default_factory=dict)
    shapes_by_route_id: dict[str, tuple[GeoPoint, ...]] = field(default_factory=dict)

    def route_labels(self, route_id: str) -> tuple[str, str]:
        """Return (short_name, long_name) for display, falling back to the id."""

        route = self.routes_by_id.get(route_id)
        if route is None:
            return route_id, f"Route {route_id}"
        short_name = route.short_name or route_id
        return short_name, route.long_name or short_name


@dataclass(frozen=True, slots=True)
class RouteShape:
    route_id: str
    short_name: str
    long_name: str
    points: tuple[GeoPoint, ...]
