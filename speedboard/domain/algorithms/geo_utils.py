from __future__ import annotations

import math
from collections.abc import Iterable

from speedboard.domain.constants import EARTH_RADIUS_M
from speedboard.domain.models.geo import GeoPoint


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, s)))


def _normalize_deg(value: float) -> float:
    deg = value % 360.0
    # -1e-15 % 360.0 == 360.0 in floating point.
    return 0.0 if deg >= 360.0 else deg


def initial_bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Initial compass bearing from `a` to `b`, in [0, 360)."""

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlon = math.radians(b.lon - a.lon)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        dlon
    )
    return _normalize_deg(math.degrees(math.atan2(y, x)))


def weighted_circular_mean_deg(
    samples: Iterable[tuple[float, float]],
) -> float | None:
    """Mean of (bearing_deg, weight) pairs computed on the unit circle.

    Returns None for an empty input or when every weight is zero.
    """

    sum_x = 0.0
    sum_y = 0.0
    total_weight = 0.0
    for bearing, weight in samples:
        rad = math.radians(bearing)
        sum_x += math.cos(rad) * weight
        sum_y += math.sin(rad) * weight
        total_weight += weight

    if total_weight <= 0.0:
        return None
    return _normalize_deg(math.degrees(math.atan2(sum_y, sum_x)))
