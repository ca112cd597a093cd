from __future__ import annotations

import os
from functools import lru_cache

from speedboard.adapters.persistence import (
    HttpGtfsStaticRepository,
    InMemoryVehicleHistoryStore,
    LocalGtfsRepository,
)
from speedboard.adapters.realtime.http_gtfs_realtime_feed_provider import (
    HttpGtfsRealtimeFeedProvider,
)
from speedboard.app.ports.output import IGtfsRepository
from speedboard.app.services.route_speed_service import RouteSpeedService


def build_route_speed_service() -> RouteSpeedService:
    gtfs_repo: IGtfsRepository
    if os.getenv("GTFS_PATH"):
        gtfs_repo = LocalGtfsRepository()
    else:
        gtfs_repo = HttpGtfsStaticRepository()

    return RouteSpeedService(
        feed_provider=HttpGtfsRealtimeFeedProvider(),
        gtfs_repository=gtfs_repo,
        history_store=InMemoryVehicleHistoryStore(),
    )


@lru_cache(maxsize=1)
def get_route_speed_service() -> RouteSpeedService:
    # Vehicle history must outlive a single request, so one instance per process.
    return build_route_speed_service()
