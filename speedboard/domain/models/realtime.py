from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class VehicleReport:
    """One vehicle's entry in a VehiclePositions feed, as decoded.

    Optional wire fields stay None when absent; a reported speed of 0.0 is a
    real value and is kept distinct from a missing one.
    """

    vehicle_id: str
    route_id: str | None
    lat: float | None
    lon: float | None
    direction_id: int | None = None
    speed_mps: float | None = None
    bearing: float | None = None
    timestamp_s: int | None = None
    label: str | None = None
    trip_id: str | None = None


@dataclass(frozen=True, slots=True)
class VehicleFeed:
    header_timestamp_s: int | None = None
    reports: tuple[VehicleReport, ...] = ()


@dataclass(frozen=True, slots=True)
class FeedSummary:
    """Entity count and a small sample of a TripUpdates or Alerts feed."""

    entity_count: int
    updated_at: datetime | None = None
    sample: tuple[dict[str, Any], ...] = field(default_factory=tuple)


def timestamp_to_datetime(timestamp_s: int | None) -> datetime | None:
    if timestamp_s is None:
        return None
    return datetime.fromtimestamp(timestamp_s, tz=timezone.utc)
