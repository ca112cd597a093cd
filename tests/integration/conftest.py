from __future__ import annotations

import os

import httpx
import pytest

from speedboard.adapters.realtime.http_gtfs_realtime_feed_provider import (
    DEFAULT_VEHICLE_POSITIONS_URL,
)


def _feed_reachable(url: str) -> bool:
    try:
        resp = httpx.get(url, timeout=5.0)
    except httpx.HTTPError:
        return False
    return 200 <= resp.status_code < 300


@pytest.fixture(scope="session")
def live_feed_url() -> str:
    """Opt-in: set SPEEDBOARD_LIVE_TESTS=1 to hit the real upstream feed."""

    if not os.getenv("SPEEDBOARD_LIVE_TESTS"):
        pytest.skip("SPEEDBOARD_LIVE_TESTS not set; skipping live feed tests")

    url = os.getenv("GTFS_RT_VEHICLE_POSITIONS_URL", DEFAULT_VEHICLE_POSITIONS_URL)
    if not _feed_reachable(url):
        msg = f"Vehicle feed not reachable at {url}"
        if os.getenv("CI") or os.getenv("GITHUB_ACTIONS"):
            pytest.fail(msg, pytrace=False)
        pytest.skip(f"{msg}; skipping integration tests")
    return url
