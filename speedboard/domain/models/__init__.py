from .geo import GeoPoint, is_valid_coordinate
from .gtfs import GtfsRoute, GtfsStaticData, RouteShape
from .history import HistorySnapshot, VehicleKey
from .realtime import FeedSummary, VehicleFeed, VehicleReport
from .telemetry import (
    DirectionSuffix,
    FleetSnapshot,
    FleetStats,
    LeaderboardEntry,
    MotionEstimate,
    ResolvedVehicle,
    RouteVariant,
    VehicleStatus,
    VehicleView,
)

__all__ = [
    "DirectionSuffix",
    "FeedSummary",
    "FleetSnapshot",
    "FleetStats",
    "GeoPoint",
    "GtfsRoute",
    "GtfsStaticData",
    "HistorySnapshot",
    "LeaderboardEntry",
    "MotionEstimate",
    "ResolvedVehicle",
    "RouteShape",
    "RouteVariant",
    "VehicleFeed",
    "VehicleKey",
    "VehicleReport",
    "VehicleStatus",
    "VehicleView",
    "is_valid_coordinate",
]
