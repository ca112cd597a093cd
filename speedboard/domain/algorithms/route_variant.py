from __future__ import annotations

from speedboard.domain.models.telemetry import DirectionSuffix, RouteVariant

_DIRECTION_SUFFIXES: dict[int, DirectionSuffix] = {
    0: DirectionSuffix.NORTH,
    1: DirectionSuffix.SOUTH,
}


def classify_route_variant(
    route_id: str, short_name: str, direction_id: int | None
) -> RouteVariant:
    """Map a route and its feed-declared direction to an aggregation variant.

    Only the feed's direction_id is considered. A computed bearing is never
    an input here, so a vehicle without a declared direction always lands in
    the unspecified variant with its short name unchanged.
    """

    suffix = _DIRECTION_SUFFIXES.get(direction_id, DirectionSuffix.UNSPECIFIED)
    if suffix is DirectionSuffix.UNSPECIFIED:
        route_number = short_name
    else:
        route_number = f"{short_name}{suffix.value}"
    return RouteVariant(route_id=route_id, suffix=suffix, route_number=route_number)
