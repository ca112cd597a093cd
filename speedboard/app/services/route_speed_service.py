from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from speedboard.app.ports.output import (
    IGtfsRepository,
    IRealtimeFeedProvider,
    IVehicleHistoryStore,
)
from speedboard.domain.algorithms.fleet_snapshot import assemble_snapshot
from speedboard.domain.algorithms.route_aggregation import build_leaderboard
from speedboard.domain.algorithms.route_variant import classify_route_variant
from speedboard.domain.algorithms.speed_resolver import resolve_motion
from speedboard.domain.models.geo import is_valid_coordinate
from speedboard.domain.models.gtfs import GtfsStaticData, RouteShape
from speedboard.domain.models.history import HistorySnapshot, VehicleKey
from speedboard.domain.models.realtime import (
    FeedSummary,
    VehicleReport,
    timestamp_to_datetime,
)
from speedboard.domain.models.telemetry import (
    FleetSnapshot,
    LeaderboardEntry,
    ResolvedVehicle,
)

logger = logging.getLogger(__name__)

_TRAILING_LETTER = re.compile(r"[A-Z]$")


@dataclass(frozen=True, slots=True)
class CycleResult:
    vehicles: tuple[ResolvedVehicle, ...]
    updated_at: datetime | None = None
    report_count: int = 0
    dropped_count: int = 0


@dataclass(slots=True)
class RouteSpeedService:
    """Runs polling cycles over the vehicle feed and serves their results.

    One cycle: fetch and decode the feed, evict stale histories, then for each
    report resolve speed/bearing against its history, record the new position
    and classify its route variant. The leaderboard and the live snapshot are
    two views over the same resolved vehicles.

    The feed is fetched before the history lock is taken, so an upstream
    failure leaves every history untouched.
    """

    feed_provider: IRealtimeFeedProvider
    gtfs_repository: IGtfsRepository
    history_store: IVehicleHistoryStore
    clock: Callable[[], float] = time.time

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def run_cycle(self) -> CycleResult:
        feed = await self.feed_provider.vehicle_positions()
        static = await self.gtfs_repository.load_static_data()

        resolved: list[ResolvedVehicle] = []
        dropped = 0
        async with self._lock:
            evicted = self.history_store.evict_stale(self.clock())
            for report in feed.reports:
                position = _usable_position(report)
                if position is None:
                    dropped += 1
                    continue
                vehicle = self._resolve(report, position, static)
                if vehicle is not None:
                    resolved.append(vehicle)

        logger.debug(
            "Cycle: %d reports, %d dropped, %d resolved, %d histories evicted",
            len(feed.reports),
            dropped,
            len(resolved),
            evicted,
        )
        return CycleResult(
            vehicles=tuple(resolved),
            updated_at=timestamp_to_datetime(feed.header_timestamp_s),
            report_count=len(feed.reports),
            dropped_count=dropped,
        )

    def _resolve(
        self,
        report: VehicleReport,
        position: tuple[str, float, float],
        static: GtfsStaticData,
    ) -> ResolvedVehicle | None:
        route_id, lat, lon = position
        key = VehicleKey(route_id=route_id, vehicle_id=report.vehicle_id)

        latest = None
        if report.timestamp_s is not None:
            latest = HistorySnapshot(lat=lat, lon=lon, timestamp_s=report.timestamp_s)

        motion = resolve_motion(self.history_store.get(key), latest, report.speed_mps)
        if latest is not None:
            self.history_store.append(key, latest)

        speed_kmh = motion.speed_kmh
        if speed_kmh is None:
            return None

        short_name, long_name = static.route_labels(route_id)
        variant = classify_route_variant(route_id, short_name, report.direction_id)
        bearing = report.bearing if report.bearing is not None else motion.bearing_deg

        return ResolvedVehicle(
            vehicle_id=report.vehicle_id,
            route_id=route_id,
            variant=variant,
            route_name=long_name,
            lat=lat,
            lon=lon,
            speed_kmh=speed_kmh,
            bearing_deg=bearing,
            label=report.label,
            timestamp_s=report.timestamp_s,
        )

    async def leaderboard(self) -> tuple[LeaderboardEntry, ...]:
        cycle = await self.run_cycle()
        return build_leaderboard(cycle.vehicles)

    async def live_snapshot(self) -> FleetSnapshot:
        cycle = await self.run_cycle()
        return assemble_snapshot(cycle.vehicles, updated_at=cycle.updated_at)

    async def route_shape(self, route_ref: str) -> RouteShape | None:
        static = await self.gtfs_repository.load_static_data()
        route_id = resolve_route_ref(static, route_ref)
        if route_id is None:
            return None
        points = static.shapes_by_route_id.get(route_id)
        if not points:
            return None
        short_name, long_name = static.route_labels(route_id)
        return RouteShape(
            route_id=route_id,
            short_name=short_name,
            long_name=long_name,
            points=points,
        )

    async def trip_updates_summary(self) -> FeedSummary:
        return await self.feed_provider.trip_updates_summary()

    async def alerts_summary(self) -> FeedSummary:
        return await self.feed_provider.alerts_summary()


def _usable_position(report: VehicleReport) -> tuple[str, float, float] | None:
    """Route id and coordinates of a report, or None when it cannot be used."""

    route_id, lat, lon = report.route_id, report.lat, report.lon
    if not route_id or lat is None or lon is None:
        return None
    if not is_valid_coordinate(lat, lon):
        return None
    return route_id, lat, lon


def resolve_route_ref(static: GtfsStaticData, route_ref: str) -> str | None:
    """Find a route id from an id or a display short name such as '26N'.

    Matching is case-insensitive. Only routes with a shape are considered.
    """

    ref = route_ref.strip().upper()
    if not ref:
        return None

    by_id: dict[str, str] = {}
    by_short: dict[str, str] = {}
    by_base: dict[str, str] = {}
    for route_id in static.shapes_by_route_id:
        by_id.setdefault(route_id.upper(), route_id)
        route = static.routes_by_id.get(route_id)
        short = (route.short_name or "").upper() if route else ""
        if short:
            by_short.setdefault(short, route_id)
            base = _TRAILING_LETTER.sub("", short)
            if base and base != short:
                by_base.setdefault(base, route_id)

    for candidate in (ref, _TRAILING_LETTER.sub("", ref)):
        if not candidate:
            continue
        found = by_id.get(candidate) or by_short.get(candidate)
        if found:
            return found
    return by_base.get(ref)
