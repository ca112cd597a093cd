from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from speedboard.domain.constants import MOVING_THRESHOLD_KMH
from speedboard.domain.models.telemetry import (
    FleetSnapshot,
    FleetStats,
    ResolvedVehicle,
    VehicleStatus,
    VehicleView,
)


def classify_status(speed_kmh: float) -> VehicleStatus:
    if speed_kmh >= MOVING_THRESHOLD_KMH:
        return VehicleStatus.MOVING
    return VehicleStatus.STOPPED


def assemble_snapshot(
    vehicles: Iterable[ResolvedVehicle], *, updated_at: datetime | None = None
) -> FleetSnapshot:
    """Build the live vehicle list and fleet-wide stats.

    Status and the fleet average use unrounded speeds; per-vehicle speeds are
    rounded to one decimal for display. The average is a plain mean.
    """

    views: list[VehicleView] = []
    total_speed = 0.0
    moving = 0
    for v in vehicles:
        status = classify_status(v.speed_kmh)
        if status is VehicleStatus.MOVING:
            moving += 1
        total_speed += v.speed_kmh
        views.append(
            VehicleView(
                vehicle_id=v.vehicle_id,
                route_id=v.route_id,
                route_number=v.variant.route_number,
                route_name=v.route_name,
                lat=v.lat,
                lon=v.lon,
                speed_kmh=round(v.speed_kmh, 1),
                status=status,
                bearing_deg=v.bearing_deg,
                label=v.label,
                timestamp_s=v.timestamp_s,
            )
        )

    total = len(views)
    stats = FleetStats(
        total=total,
        moving=moving,
        stopped=total - moving,
        average_speed=round(total_speed / total, 1) if total else 0.0,
    )
    return FleetSnapshot(stats=stats, vehicles=tuple(views), updated_at=updated_at)
