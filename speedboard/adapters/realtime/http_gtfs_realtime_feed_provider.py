from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field

import httpx

from speedboard.adapters.realtime.gtfs_rt_decode import (
    parse_vehicle_positions,
    summarize_alerts,
    summarize_trip_updates,
)
from speedboard.app.ports.output import IRealtimeFeedProvider
from speedboard.domain.exceptions.feed import FeedUnavailableError
from speedboard.domain.models.realtime import FeedSummary, VehicleFeed

logger = logging.getLogger(__name__)

DEFAULT_VEHICLE_POSITIONS_URL = (
    "https://www.miapp.ca/GTFS_RT/Vehicle/VehiclePositions.pb"
)
DEFAULT_TRIP_UPDATES_URL = "https://www.miapp.ca/GTFS_RT/TripUpdate/TripUpdates.pb"
DEFAULT_ALERTS_URL = "https://www.miapp.ca/gtfs_rt/Alerts/Alerts.pb"


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse 'Key:Value;Key2:Value2' into a header dict."""

    raw = (raw or "").strip()
    if not raw:
        return {}
    headers: dict[str, str] = {}
    for part in raw.split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip()
        if k:
            headers[k] = v.strip()
    return headers


@dataclass(slots=True)
class HttpGtfsRealtimeFeedProvider(IRealtimeFeedProvider):
    """Fetches GTFS-Realtime feeds over HTTP.

    Env vars:
      - GTFS_RT_VEHICLE_POSITIONS_URL, GTFS_RT_TRIP_UPDATES_URL, GTFS_RT_ALERTS_URL
      - GTFS_RT_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - GTFS_RT_TIMEOUT_S: request timeout (default 10)
      - GTFS_RT_CACHE_TTL_S: in-process cache TTL seconds (default 5)

    Notes:
      - Raw payloads are cached per URL so the leaderboard and the live view
        polled together share one upstream request.
      - Any transport error or non-2xx status raises FeedUnavailableError;
        a stale payload is never served in its place.
    """

    vehicle_positions_url: str | None = None
    trip_updates_url: str | None = None
    alerts_url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    cache_ttl_s: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _cache: dict[str, tuple[float, bytes]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.vehicle_positions_url is None:
            self.vehicle_positions_url = os.getenv(
                "GTFS_RT_VEHICLE_POSITIONS_URL", DEFAULT_VEHICLE_POSITIONS_URL
            )
        if self.trip_updates_url is None:
            self.trip_updates_url = os.getenv(
                "GTFS_RT_TRIP_UPDATES_URL", DEFAULT_TRIP_UPDATES_URL
            )
        if self.alerts_url is None:
            self.alerts_url = os.getenv("GTFS_RT_ALERTS_URL", DEFAULT_ALERTS_URL)
        if self.headers_raw is None:
            self.headers_raw = os.getenv("GTFS_RT_HEADERS")
        if os.getenv("GTFS_RT_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_RT_TIMEOUT_S"])
        if os.getenv("GTFS_RT_CACHE_TTL_S"):
            self.cache_ttl_s = float(os.environ["GTFS_RT_CACHE_TTL_S"])

    async def _fetch(self, url: str | None) -> bytes:
        if not url:
            raise FeedUnavailableError("Feed URL not configured")

        async with self._lock:
            now_mono = time.monotonic()
            cached = self._cache.get(url)
            if cached is not None and (now_mono - cached[0]) < self.cache_ttl_s:
                return cached[1]

            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout_s, transport=self.transport
                ) as client:
                    resp = await client.get(url, headers=parse_headers(self.headers_raw))
                    resp.raise_for_status()
                    content = resp.content
            except httpx.HTTPStatusError as exc:
                raise FeedUnavailableError(
                    f"Feed request failed with status {exc.response.status_code}: {url}"
                ) from exc
            except httpx.HTTPError as exc:
                raise FeedUnavailableError(f"Feed request failed: {url}: {exc}") from exc

            self._cache[url] = (time.monotonic(), content)
            logger.debug("Fetched %d bytes from %s", len(content), url)
            return content

    async def vehicle_positions(self) -> VehicleFeed:
        return parse_vehicle_positions(await self._fetch(self.vehicle_positions_url))

    async def trip_updates_summary(self) -> FeedSummary:
        return summarize_trip_updates(await self._fetch(self.trip_updates_url))

    async def alerts_summary(self) -> FeedSummary:
        return summarize_alerts(await self._fetch(self.alerts_url))
