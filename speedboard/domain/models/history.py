from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class VehicleKey:
    """Vehicle ids are only unique within their route's reporting."""

    route_id: str
    vehicle_id: str


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    lat: float
    lon: float
    timestamp_s: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lon=self.lon)
