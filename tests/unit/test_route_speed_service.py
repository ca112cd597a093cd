from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from speedboard.adapters.persistence.in_memory_vehicle_history_store import (
    InMemoryVehicleHistoryStore,
)
from speedboard.app.services.route_speed_service import (
    RouteSpeedService,
    resolve_route_ref,
)
from speedboard.domain.exceptions.feed import FeedUnavailableError
from speedboard.domain.models.geo import GeoPoint
from speedboard.domain.models.gtfs import GtfsRoute, GtfsStaticData
from speedboard.domain.models.history import HistorySnapshot, VehicleKey
from speedboard.domain.models.realtime import FeedSummary, VehicleFeed, VehicleReport
from speedboard.domain.models.telemetry import DirectionSuffix, VehicleStatus

M_PER_DEG = 111194.93
NOW = 1_700_000_030.0


@dataclass(slots=True)
class FakeFeedProvider:
    feed: VehicleFeed = field(default_factory=VehicleFeed)
    error: Exception | None = None
    summary: FeedSummary = field(default_factory=lambda: FeedSummary(entity_count=3))

    async def vehicle_positions(self) -> VehicleFeed:
        if self.error is not None:
            raise self.error
        return self.feed

    async def trip_updates_summary(self) -> FeedSummary:
        return self.summary

    async def alerts_summary(self) -> FeedSummary:
        return self.summary


@dataclass(slots=True)
class FakeGtfsRepository:
    data: GtfsStaticData

    async def load_static_data(self) -> GtfsStaticData:
        return self.data


STATIC = GtfsStaticData(
    routes_by_id={
        "R26": GtfsRoute(route_id="R26", short_name="26", long_name="Burnhamthorpe"),
        "R35": GtfsRoute(route_id="R35", short_name="35A", long_name="Eglinton"),
    },
    shapes_by_route_id={
        "R26": (GeoPoint(43.59, -79.61), GeoPoint(43.60, -79.60)),
        "R35": (GeoPoint(43.50, -79.50), GeoPoint(43.51, -79.51)),
    },
)


def _report(
    vehicle_id: str,
    *,
    route_id: str | None = "R26",
    meters_north: float = 0.0,
    ts: int | None = int(NOW),
    speed_mps: float | None = None,
    direction_id: int | None = None,
    bearing: float | None = None,
    lat: float | None = 43.6,
) -> VehicleReport:
    return VehicleReport(
        vehicle_id=vehicle_id,
        route_id=route_id,
        lat=None if lat is None else lat + meters_north / M_PER_DEG,
        lon=-79.6,
        direction_id=direction_id,
        speed_mps=speed_mps,
        bearing=bearing,
        timestamp_s=ts,
        label=f"label-{vehicle_id}",
    )


def _service(
    provider: FakeFeedProvider, store: InMemoryVehicleHistoryStore | None = None
) -> RouteSpeedService:
    return RouteSpeedService(
        feed_provider=provider,
        gtfs_repository=FakeGtfsRepository(STATIC),
        history_store=store if store is not None else InMemoryVehicleHistoryStore(),
        clock=lambda: NOW,
    )


def test_leaderboard_separates_feed_directions() -> None:
    provider = FakeFeedProvider(
        VehicleFeed(
            reports=(
                _report("a", direction_id=0, speed_mps=10.0),
                _report("b", direction_id=0, speed_mps=12.0),
                _report("c", direction_id=1, speed_mps=5.0),
            )
        )
    )

    board = asyncio.run(_service(provider).leaderboard())

    assert [(e.route_number, e.speed, e.vehicle_count) for e in board] == [
        ("26N", 39.6, 2),
        ("26S", 18.0, 1),
    ]
    assert board[0].route_name == "Burnhamthorpe"


def test_speed_is_computed_from_history_across_cycles() -> None:
    provider = FakeFeedProvider(VehicleFeed(reports=(_report("a", ts=int(NOW) - 30),)))
    service = _service(provider)

    first = asyncio.run(service.run_cycle())
    assert first.vehicles == ()

    provider.feed = VehicleFeed(reports=(_report("a", meters_north=200.0),))
    second = asyncio.run(service.run_cycle())

    assert len(second.vehicles) == 1
    vehicle = second.vehicles[0]
    assert vehicle.speed_kmh == pytest.approx(24.0, rel=1e-3)
    assert vehicle.bearing_deg == pytest.approx(0.0, abs=1e-6)


def test_computed_bearing_never_picks_a_direction() -> None:
    store = InMemoryVehicleHistoryStore()
    store.append(
        VehicleKey("R26", "a"), HistorySnapshot(lat=43.6, lon=-79.6, timestamp_s=NOW - 30)
    )
    provider = FakeFeedProvider(VehicleFeed(reports=(_report("a", meters_north=300.0),)))

    cycle = asyncio.run(_service(provider, store).run_cycle())

    vehicle = cycle.vehicles[0]
    assert vehicle.bearing_deg is not None
    assert vehicle.variant.suffix is DirectionSuffix.UNSPECIFIED
    assert vehicle.variant.route_number == "26"


def test_malformed_reports_are_dropped_without_touching_history() -> None:
    store = InMemoryVehicleHistoryStore()
    provider = FakeFeedProvider(
        VehicleFeed(
            reports=(
                _report("no-route", route_id=None, speed_mps=10.0),
                _report("no-position", lat=None, speed_mps=10.0),
                _report("ok", speed_mps=10.0),
            )
        )
    )

    cycle = asyncio.run(_service(provider, store).run_cycle())

    assert cycle.report_count == 3
    assert cycle.dropped_count == 2
    assert [v.vehicle_id for v in cycle.vehicles] == ["ok"]
    assert len(store) == 1


def test_unresolved_vehicle_still_records_history() -> None:
    store = InMemoryVehicleHistoryStore()
    provider = FakeFeedProvider(
        VehicleFeed(
            reports=(
                _report("too-fast", speed_mps=30.0),
                _report("no-ts", ts=None),
            )
        )
    )

    cycle = asyncio.run(_service(provider, store).run_cycle())

    assert cycle.vehicles == ()
    assert store.get(VehicleKey("R26", "too-fast"))[0].timestamp_s == NOW
    assert store.get(VehicleKey("R26", "no-ts")) == ()


def test_stale_histories_are_evicted_before_processing() -> None:
    store = InMemoryVehicleHistoryStore()
    stale = VehicleKey("R26", "gone")
    store.append(stale, HistorySnapshot(lat=43.6, lon=-79.6, timestamp_s=NOW - 301))
    provider = FakeFeedProvider(VehicleFeed(reports=(_report("a", speed_mps=10.0),)))

    asyncio.run(_service(provider, store).run_cycle())

    assert stale not in store


def test_feed_failure_propagates_and_leaves_history_untouched() -> None:
    store = InMemoryVehicleHistoryStore()
    stale = VehicleKey("R26", "gone")
    store.append(stale, HistorySnapshot(lat=43.6, lon=-79.6, timestamp_s=NOW - 301))
    provider = FakeFeedProvider(error=FeedUnavailableError("503"))

    with pytest.raises(FeedUnavailableError):
        asyncio.run(_service(provider, store).leaderboard())

    assert stale in store


def test_live_snapshot_stats_and_bearing_sources() -> None:
    store = InMemoryVehicleHistoryStore()
    store.append(
        VehicleKey("R35", "b"), HistorySnapshot(lat=43.6, lon=-79.6, timestamp_s=NOW - 20)
    )
    provider = FakeFeedProvider(
        VehicleFeed(
            header_timestamp_s=int(NOW),
            reports=(
                _report("a", speed_mps=10.0, bearing=270.0, direction_id=1),
                _report("b", route_id="R35", meters_north=10.0),
                _report("unknown", route_id="R99", speed_mps=0.2),
            ),
        )
    )

    snapshot = asyncio.run(_service(provider, store).live_snapshot())

    assert snapshot.updated_at == datetime.fromtimestamp(int(NOW), tz=timezone.utc)
    assert snapshot.stats.total == 2
    assert snapshot.stats.moving == 1
    assert snapshot.stats.stopped == 1
    by_id = {v.vehicle_id: v for v in snapshot.vehicles}
    assert by_id["a"].route_number == "26S"
    assert by_id["a"].bearing_deg == 270.0
    assert by_id["a"].label == "label-a"
    assert by_id["b"].route_number == "35A"
    assert by_id["b"].route_name == "Eglinton"
    assert by_id["b"].speed_kmh == 1.8
    assert by_id["b"].status is VehicleStatus.STOPPED
    assert by_id["b"].bearing_deg == pytest.approx(0.0, abs=1e-6)


def test_unknown_route_falls_back_to_raw_identifier() -> None:
    provider = FakeFeedProvider(
        VehicleFeed(reports=(_report("x", route_id="R99", speed_mps=10.0),))
    )

    board = asyncio.run(_service(provider).leaderboard())

    assert board[0].route_number == "R99"
    assert board[0].route_name == "Route R99"


@pytest.mark.parametrize(
    ("ref", "expected"),
    [
        ("R26", "R26"),
        ("r26", "R26"),
        ("26", "R26"),
        ("26N", "R26"),
        ("26s", "R26"),
        ("35A", "R35"),
        ("35", "R35"),
        ("404", None),
        ("", None),
    ],
)
def test_resolve_route_ref(ref: str, expected: str | None) -> None:
    assert resolve_route_ref(STATIC, ref) == expected


def test_route_shape_returns_points_and_labels() -> None:
    service = _service(FakeFeedProvider())

    shape = asyncio.run(service.route_shape("26N"))

    assert shape is not None
    assert shape.route_id == "R26"
    assert shape.short_name == "26"
    assert shape.long_name == "Burnhamthorpe"
    assert len(shape.points) == 2
    assert asyncio.run(service.route_shape("404")) is None


def test_feed_summaries_are_delegated() -> None:
    service = _service(FakeFeedProvider())

    assert asyncio.run(service.trip_updates_summary()).entity_count == 3
    assert asyncio.run(service.alerts_summary()).entity_count == 3


def test_resolved_vehicle_keeps_reported_route_and_position() -> None:
    store = InMemoryVehicleHistoryStore()
    partial = _report("no-lon", speed_mps=10.0)
    provider = FakeFeedProvider(
        VehicleFeed(
            reports=(
                _report("empty-route", route_id="", speed_mps=10.0),
                VehicleReport(
                    vehicle_id="no-lon",
                    route_id="R26",
                    lat=partial.lat,
                    lon=None,
                    speed_mps=10.0,
                    timestamp_s=int(NOW),
                ),
                _report("ok", route_id="R35", lat=0.0, speed_mps=10.0),
            )
        )
    )

    cycle = asyncio.run(_service(provider, store).run_cycle())

    assert cycle.dropped_count == 2
    (vehicle,) = cycle.vehicles
    assert (vehicle.route_id, vehicle.lat, vehicle.lon) == ("R35", 0.0, -79.6)
    assert store.get(VehicleKey("R35", "ok"))[-1].lat == 0.0
    assert VehicleKey("", "empty-route") not in store
