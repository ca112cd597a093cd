from __future__ import annotations

import asyncio

import httpx
import pytest
from google.transit import gtfs_realtime_pb2

from speedboard.adapters.realtime.http_gtfs_realtime_feed_provider import (
    HttpGtfsRealtimeFeedProvider,
    parse_headers,
)
from speedboard.domain.exceptions.feed import FeedUnavailableError


def _payload() -> bytes:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    ent = feed.entity.add()
    ent.id = "e1"
    ent.vehicle.trip.route_id = "26"
    ent.vehicle.position.latitude = 43.6
    ent.vehicle.position.longitude = -79.6
    return feed.SerializeToString()


def _provider(handler, **kwargs) -> HttpGtfsRealtimeFeedProvider:
    return HttpGtfsRealtimeFeedProvider(
        vehicle_positions_url="https://feed.test/vp.pb",
        trip_updates_url="https://feed.test/tu.pb",
        alerts_url="https://feed.test/al.pb",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_parse_headers() -> None:
    assert parse_headers("X-Key: abc; Accept:application/x-protobuf;bad;:x") == {
        "X-Key": "abc",
        "Accept": "application/x-protobuf",
    }
    assert parse_headers(None) == {}


def test_vehicle_positions_sends_headers_and_caches() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=_payload())

    provider = _provider(handler, headers_raw="X-Key:abc", cache_ttl_s=60.0)

    async def scenario():
        first = await provider.vehicle_positions()
        second = await provider.vehicle_positions()
        return first, second

    first, second = asyncio.run(scenario())

    assert len(seen) == 1
    assert seen[0].headers["X-Key"] == "abc"
    assert first.reports[0].route_id == "26"
    assert second == first


def test_error_status_raises_unavailable() -> None:
    provider = _provider(lambda request: httpx.Response(503), cache_ttl_s=0.0)

    with pytest.raises(FeedUnavailableError):
        asyncio.run(provider.vehicle_positions())


def test_transport_error_raises_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(handler)

    with pytest.raises(FeedUnavailableError):
        asyncio.run(provider.trip_updates_summary())


def test_env_configuration(monkeypatch) -> None:
    monkeypatch.setenv("GTFS_RT_VEHICLE_POSITIONS_URL", "https://env.test/vp.pb")
    monkeypatch.setenv("GTFS_RT_TIMEOUT_S", "3")
    monkeypatch.setenv("GTFS_RT_CACHE_TTL_S", "0")

    provider = HttpGtfsRealtimeFeedProvider()

    assert provider.vehicle_positions_url == "https://env.test/vp.pb"
    assert provider.timeout_s == 3.0
    assert provider.cache_ttl_s == 0.0
