from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys, which the web frontend consumes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class LeaderboardEntrySchema(CamelModel):
    route_number: str
    route_name: str
    speed: float
    vehicle_count: int


class FleetStatsSchema(CamelModel):
    total: int
    moving: int
    stopped: int
    average_speed: float


class VehicleSchema(CamelModel):
    id: str
    label: str | None = None
    route_id: str
    route_number: str
    route_name: str
    latitude: float
    longitude: float
    bearing: float | None = None
    speed_kmh: float
    timestamp: int | None = None
    status: Literal["moving", "stopped"]


class LiveSnapshotSchema(CamelModel):
    updated_at: datetime | None = None
    stats: FleetStatsSchema
    vehicles: list[VehicleSchema]


class RouteShapeSchema(CamelModel):
    route_id: str
    short_name: str
    long_name: str
    points: list[GeoPointSchema]


class FeedSummarySchema(CamelModel):
    entity_count: int
    updated_at: datetime | None = None
    sample: list[dict[str, Any]]
