from __future__ import annotations

import asyncio
import logging
import os

from speedboard.adapters.api.dependencies import build_route_speed_service
from speedboard.app.services.route_speed_service import RouteSpeedService
from speedboard.domain.exceptions.feed import FeedError
from speedboard.domain.models.telemetry import LeaderboardEntry

logger = logging.getLogger(__name__)


async def run_once(
    service: RouteSpeedService, *, top_n: int = 5
) -> tuple[LeaderboardEntry, ...]:
    """Run one cycle and log the fastest routes; feed failures are logged, not raised."""

    try:
        board = await service.leaderboard()
    except FeedError as exc:
        logger.warning("Polling cycle failed: %s", exc)
        return ()

    for rank, entry in enumerate(board[:top_n], start=1):
        logger.info(
            "#%d %s %s: %.1f km/h (%d vehicles)",
            rank,
            entry.route_number,
            entry.route_name,
            entry.speed,
            entry.vehicle_count,
        )
    return board


async def poll_forever(
    service: RouteSpeedService, *, interval_s: float, loop: bool = True
) -> None:
    while True:
        await run_once(service)
        if not loop:
            return
        await asyncio.sleep(interval_s)


def main() -> None:
    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    interval_s = float(os.getenv("POLL_INTERVAL_S", "15"))
    loop = os.getenv("WORKER_LOOP", "1").strip().lower() not in {"0", "false", "no"}

    asyncio.run(
        poll_forever(build_route_speed_service(), interval_s=interval_s, loop=loop)
    )


if __name__ == "__main__":
    main()
