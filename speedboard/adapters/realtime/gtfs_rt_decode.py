"""Decode GTFS-Realtime protobuf payloads into domain models."""

from __future__ import annotations

from typing import Any

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from speedboard.domain.exceptions.feed import FeedDecodeError
from speedboard.domain.models.geo import is_valid_coordinate
from speedboard.domain.models.realtime import (
    FeedSummary,
    VehicleFeed,
    VehicleReport,
    timestamp_to_datetime,
)

SAMPLE_SIZE = 5


def _decode(content: bytes) -> Any:
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(content)
    except DecodeError as exc:
        raise FeedDecodeError(f"Invalid GTFS-Realtime payload: {exc}") from exc
    return feed


def _header_timestamp_s(feed: Any) -> int | None:
    if feed.HasField("header") and feed.header.HasField("timestamp"):
        ts = int(feed.header.timestamp)
        return ts if ts > 0 else None
    return None


def parse_vehicle_positions(content: bytes) -> VehicleFeed:
    """Decode a VehiclePositions feed.

    Entities lacking a route id or a position are kept with None fields;
    filtering them is the caller's decision.
    """

    feed = _decode(content)
    out: list[VehicleReport] = []

    for ent in feed.entity:
        if not ent.HasField("vehicle"):
            continue
        v = ent.vehicle

        route_id = None
        trip_id = None
        direction_id = None
        if v.HasField("trip"):
            route_id = v.trip.route_id or None
            trip_id = v.trip.trip_id or None
            if v.trip.HasField("direction_id"):
                direction_id = int(v.trip.direction_id)

        lat = lon = bearing = speed = None
        if v.HasField("position"):
            pos = v.position
            lat = float(pos.latitude)
            lon = float(pos.longitude)
            if not is_valid_coordinate(lat, lon):
                lat = lon = None
            bearing = float(pos.bearing) if pos.HasField("bearing") else None
            speed = float(pos.speed) if pos.HasField("speed") else None

        vehicle_id = None
        label = None
        if v.HasField("vehicle"):
            vehicle_id = v.vehicle.id or None
            label = v.vehicle.label or None
        vehicle_id = vehicle_id or ent.id or f"{route_id}-{lat}-{lon}"

        timestamp_s = None
        if v.HasField("timestamp") and int(v.timestamp) > 0:
            timestamp_s = int(v.timestamp)

        out.append(
            VehicleReport(
                vehicle_id=vehicle_id,
                route_id=route_id,
                lat=lat,
                lon=lon,
                direction_id=direction_id,
                speed_mps=speed,
                bearing=bearing,
                timestamp_s=timestamp_s,
                label=label,
                trip_id=trip_id,
            )
        )

    return VehicleFeed(header_timestamp_s=_header_timestamp_s(feed), reports=tuple(out))


def summarize_trip_updates(content: bytes) -> FeedSummary:
    feed = _decode(content)

    sample: list[dict[str, Any]] = []
    for ent in feed.entity:
        if len(sample) >= SAMPLE_SIZE:
            break
        if not ent.HasField("trip_update"):
            continue
        tu = ent.trip_update
        sample.append(
            {
                "tripId": tu.trip.trip_id or None,
                "routeId": tu.trip.route_id or None,
                "stopUpdates": len(tu.stop_time_update),
            }
        )

    return FeedSummary(
        entity_count=len(feed.entity),
        updated_at=timestamp_to_datetime(_header_timestamp_s(feed)),
        sample=tuple(sample),
    )


def summarize_alerts(content: bytes) -> FeedSummary:
    feed = _decode(content)

    sample: list[dict[str, Any]] = []
    for ent in feed.entity:
        if len(sample) >= SAMPLE_SIZE:
            break
        if not ent.HasField("alert"):
            continue
        alert = ent.alert
        translations = alert.header_text.translation
        effect = None
        if alert.HasField("effect"):
            effect = gtfs_realtime_pb2.Alert.Effect.Name(alert.effect)
        sample.append(
            {
                "header": translations[0].text if translations else None,
                "effect": effect,
            }
        )

    return FeedSummary(
        entity_count=len(feed.entity),
        updated_at=timestamp_to_datetime(_header_timestamp_s(feed)),
        sample=tuple(sample),
    )
