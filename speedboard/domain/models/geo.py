from __future__ import annotations

import math
from dataclasses import dataclass


def is_valid_coordinate(lat: float | None, lon: float | None) -> bool:
    """True when both values are finite and inside WGS84 bounds."""

    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")
