from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from speedboard.domain.constants import TRIM_FRACTION, TRIM_MIN_SAMPLES
from speedboard.domain.models.telemetry import LeaderboardEntry, ResolvedVehicle


def trimmed_mean(samples: Sequence[float]) -> float:
    """Mean after dropping the slowest and fastest TRIM_FRACTION of samples.

    Sets smaller than TRIM_MIN_SAMPLES are averaged untrimmed.
    """

    if not samples:
        raise ValueError("trimmed_mean requires at least one sample")

    ordered = sorted(samples)
    if len(ordered) >= TRIM_MIN_SAMPLES:
        trim = max(1, math.floor(len(ordered) * TRIM_FRACTION))
        ordered = ordered[trim : len(ordered) - trim]
    return sum(ordered) / len(ordered)


@dataclass(slots=True)
class _Bucket:
    route_number: str
    route_name: str
    speeds: list[float] = field(default_factory=list)


def build_leaderboard(
    vehicles: Iterable[ResolvedVehicle],
) -> tuple[LeaderboardEntry, ...]:
    """Average speed per route variant for one cycle, fastest first."""

    buckets: dict[str, _Bucket] = {}
    for v in vehicles:
        bucket = buckets.get(v.variant.key)
        if bucket is None:
            bucket = _Bucket(route_number=v.variant.route_number, route_name=v.route_name)
            buckets[v.variant.key] = bucket
        bucket.speeds.append(v.speed_kmh)

    entries = [
        LeaderboardEntry(
            route_number=b.route_number,
            route_name=b.route_name,
            speed=round(trimmed_mean(b.speeds), 1),
            vehicle_count=len(b.speeds),
        )
        for b in buckets.values()
        if b.speeds
    ]
    entries.sort(key=lambda e: e.speed, reverse=True)
    return tuple(entries)
