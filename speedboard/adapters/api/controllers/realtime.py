from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from speedboard.adapters.api.dependencies import get_route_speed_service
from speedboard.adapters.api.schemas.realtime import (
    FeedSummarySchema,
    FleetStatsSchema,
    GeoPointSchema,
    LeaderboardEntrySchema,
    LiveSnapshotSchema,
    RouteShapeSchema,
    VehicleSchema,
)
from speedboard.app.services.route_speed_service import RouteSpeedService
from speedboard.domain.models.realtime import FeedSummary

router = APIRouter(tags=["realtime"])


def _summary_to_schema(summary: FeedSummary) -> FeedSummarySchema:
    return FeedSummarySchema(
        entity_count=summary.entity_count,
        updated_at=summary.updated_at,
        sample=[dict(s) for s in summary.sample],
    )


@router.get("/leaderboard", response_model=list[LeaderboardEntrySchema])
async def get_leaderboard(
    service: RouteSpeedService = Depends(get_route_speed_service),
) -> list[LeaderboardEntrySchema]:
    return [
        LeaderboardEntrySchema(
            route_number=e.route_number,
            route_name=e.route_name,
            speed=e.speed,
            vehicle_count=e.vehicle_count,
        )
        for e in await service.leaderboard()
    ]


@router.get("/vehicles", response_model=LiveSnapshotSchema)
async def get_vehicles(
    service: RouteSpeedService = Depends(get_route_speed_service),
) -> LiveSnapshotSchema:
    snapshot = await service.live_snapshot()
    stats = snapshot.stats

    return LiveSnapshotSchema(
        updated_at=snapshot.updated_at,
        stats=FleetStatsSchema(
            total=stats.total,
            moving=stats.moving,
            stopped=stats.stopped,
            average_speed=stats.average_speed,
        ),
        vehicles=[
            VehicleSchema(
                id=v.vehicle_id,
                label=v.label,
                route_id=v.route_id,
                route_number=v.route_number,
                route_name=v.route_name,
                latitude=v.lat,
                longitude=v.lon,
                bearing=v.bearing_deg,
                speed_kmh=v.speed_kmh,
                timestamp=v.timestamp_s,
                status=v.status.value,
            )
            for v in snapshot.vehicles
        ],
    )


@router.get("/routes/{route_ref}/shape", response_model=RouteShapeSchema)
async def get_route_shape(
    route_ref: str,
    service: RouteSpeedService = Depends(get_route_speed_service),
) -> RouteShapeSchema:
    shape = await service.route_shape(route_ref)
    if shape is None:
        raise HTTPException(status_code=404, detail="Route shape not found")
    return RouteShapeSchema(
        route_id=shape.route_id,
        short_name=shape.short_name,
        long_name=shape.long_name,
        points=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in shape.points],
    )


@router.get("/feeds/trip-updates", response_model=FeedSummarySchema)
async def get_trip_updates_summary(
    service: RouteSpeedService = Depends(get_route_speed_service),
) -> FeedSummarySchema:
    return _summary_to_schema(await service.trip_updates_summary())


@router.get("/feeds/alerts", response_model=FeedSummarySchema)
async def get_alerts_summary(
    service: RouteSpeedService = Depends(get_route_speed_service),
) -> FeedSummarySchema:
    return _summary_to_schema(await service.alerts_summary())
