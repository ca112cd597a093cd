from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from speedboard.domain.constants import MPS_TO_KMH


class DirectionSuffix(str, Enum):
    NORTH = "N"
    SOUTH = "S"
    UNSPECIFIED = "U"


class VehicleStatus(str, Enum):
    MOVING = "moving"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class RouteVariant:
    route_id: str
    suffix: DirectionSuffix
    route_number: str

    @property
    def key(self) -> str:
        return f"{self.route_id}:{self.suffix.value}"


@dataclass(frozen=True, slots=True)
class MotionEstimate:
    """Outcome of resolving one report against its vehicle history."""

    speed_mps: float | None = None
    bearing_deg: float | None = None
    computed_speed_mps: float | None = None
    reliable: bool = False

    @property
    def speed_kmh(self) -> float | None:
        if self.speed_mps is None:
            return None
        return self.speed_mps * MPS_TO_KMH


@dataclass(frozen=True, slots=True)
class ResolvedVehicle:
    """A vehicle that produced a usable speed in the current cycle."""

    vehicle_id: str
    route_id: str
    variant: RouteVariant
    route_name: str
    lat: float
    lon: float
    speed_kmh: float
    bearing_deg: float | None = None
    label: str | None = None
    timestamp_s: int | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    route_number: str
    route_name: str
    speed: float
    vehicle_count: int


@dataclass(frozen=True, slots=True)
class VehicleView:
    vehicle_id: str
    route_id: str
    route_number: str
    route_name: str
    lat: float
    lon: float
    speed_kmh: float
    status: VehicleStatus
    bearing_deg: float | None = None
    label: str | None = None
    timestamp_s: int | None = None


@dataclass(frozen=True, slots=True)
class FleetStats:
    total: int = 0
    moving: int = 0
    stopped: int = 0
    average_speed: float = 0.0


@dataclass(frozen=True, slots=True)
class FleetSnapshot:
    stats: FleetStats
    vehicles: tuple[VehicleView, ...] = ()
    updated_at: datetime | None = None
