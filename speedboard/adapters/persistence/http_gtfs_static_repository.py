from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from speedboard.adapters.persistence.gtfs_static_parser import parse_gtfs_zip
from speedboard.app.ports.output import IGtfsRepository
from speedboard.domain.exceptions.feed import StaticDataError
from speedboard.domain.models.gtfs import GtfsStaticData

logger = logging.getLogger(__name__)

DEFAULT_GTFS_STATIC_URL = "https://www.miapp.ca/GTFS/google_transit.zip"


@dataclass(slots=True)
class HttpGtfsStaticRepository(IGtfsRepository):
    """Downloads and caches a static GTFS archive.

    Env vars:
      - GTFS_STATIC_URL: URL of the GTFS ZIP
      - GTFS_STATIC_TTL_S: refresh interval seconds (default 43200, 12h)
      - GTFS_STATIC_TIMEOUT_S: download timeout (default 60)
      - GTFS_STATIC_RETRY_S: wait after a failed refresh before retrying (default 300)

    A failed refresh is logged and the previous data is returned; until the
    first success that is empty data, so callers fall back to raw route ids.
    """

    url: str | None = None
    ttl_s: float = 12 * 60 * 60
    timeout_s: float = 60.0
    retry_after_s: float = 5 * 60
    transport: httpx.AsyncBaseTransport | None = None
    clock: Callable[[], float] = time.monotonic

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _data: GtfsStaticData = field(default_factory=GtfsStaticData, init=False)
    _fetched_at: float | None = field(default=None, init=False)
    _failed_at: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("GTFS_STATIC_URL", DEFAULT_GTFS_STATIC_URL)
        if os.getenv("GTFS_STATIC_TTL_S"):
            self.ttl_s = float(os.environ["GTFS_STATIC_TTL_S"])
        if os.getenv("GTFS_STATIC_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_STATIC_TIMEOUT_S"])
        if os.getenv("GTFS_STATIC_RETRY_S"):
            self.retry_after_s = float(os.environ["GTFS_STATIC_RETRY_S"])

    def _is_fresh(self) -> bool:
        return (
            self._fetched_at is not None
            and (self.clock() - self._fetched_at) < self.ttl_s
        )

    def _in_backoff(self) -> bool:
        return (
            self._failed_at is not None
            and (self.clock() - self._failed_at) < self.retry_after_s
        )

    async def load_static_data(self) -> GtfsStaticData:
        async with self._lock:
            if self._is_fresh() or self._in_backoff():
                return self._data

            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout_s,
                    transport=self.transport,
                    follow_redirects=True,
                ) as client:
                    resp = await client.get(self.url or "")
                    resp.raise_for_status()
                data = parse_gtfs_zip(resp.content)
            except (httpx.HTTPError, StaticDataError) as exc:
                self._failed_at = self.clock()
                logger.warning(
                    "Failed to refresh static GTFS from %s, keeping %d cached routes: %s",
                    self.url,
                    len(self._data.routes_by_id),
                    exc,
                )
                return self._data

            self._data = data
            self._fetched_at = self.clock()
            self._failed_at = None
            logger.info(
                "Loaded static GTFS: %d routes, %d route shapes",
                len(data.routes_by_id),
                len(data.shapes_by_route_id),
            )
            return self._data
