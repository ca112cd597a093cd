"""Best-estimate speed and bearing for one vehicle report.

Two sources are considered: the speed the vehicle reports itself, and a
speed triangulated from its recent positions. The reported value wins when
plausible; the computed one is used only when its time window is reliable.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from speedboard.domain.algorithms.geo_utils import (
    haversine_distance_m,
    initial_bearing_deg,
    weighted_circular_mean_deg,
)
from speedboard.domain.constants import (
    MAX_JUMP_METERS,
    MAX_SPEED_KMH,
    MAX_TIME_DELTA_SECONDS,
    MAX_TOTAL_TIME_SECONDS,
    MIN_SPEED_KMH,
    MIN_TIME_DELTA_SECONDS,
    MPS_TO_KMH,
)
from speedboard.domain.models.history import HistorySnapshot
from speedboard.domain.models.telemetry import MotionEstimate


@dataclass(slots=True)
class TrackTotals:
    distance_m: float = 0.0
    time_s: float = 0.0
    bearing_samples: list[tuple[float, float]] = field(default_factory=list)

    @property
    def reliable(self) -> bool:
        return MIN_TIME_DELTA_SECONDS <= self.time_s <= MAX_TOTAL_TIME_SECONDS

    @property
    def speed_mps(self) -> float | None:
        if self.time_s <= 0.0:
            return None
        return self.distance_m / self.time_s


def is_valid_speed_kmh(speed_kmh: float) -> bool:
    return math.isfinite(speed_kmh) and MIN_SPEED_KMH <= speed_kmh <= MAX_SPEED_KMH


def accumulate_track(points: Sequence[HistorySnapshot]) -> TrackTotals:
    """Sum distance and time over consecutive segments that pass the filters.

    A segment is skipped when its elapsed time is non-positive or longer than
    MAX_TIME_DELTA_SECONDS, or when it jumps further than MAX_JUMP_METERS.
    """

    totals = TrackTotals()
    for a, b in zip(points, points[1:]):
        dt = b.timestamp_s - a.timestamp_s
        if dt <= 0 or dt > MAX_TIME_DELTA_SECONDS:
            continue

        pa = a.point
        pb = b.point
        distance = haversine_distance_m(pa, pb)
        if distance > MAX_JUMP_METERS:
            continue

        totals.distance_m += distance
        totals.time_s += dt
        totals.bearing_samples.append((initial_bearing_deg(pa, pb), distance))

    return totals


def pick_speed_mps(
    reported_mps: float | None,
    computed_mps: float | None,
    *,
    reliable: bool,
) -> float | None:
    if reported_mps is not None and math.isfinite(reported_mps):
        if is_valid_speed_kmh(reported_mps * MPS_TO_KMH):
            return reported_mps

    if reliable and computed_mps is not None:
        if is_valid_speed_kmh(computed_mps * MPS_TO_KMH):
            return computed_mps

    return None


def _fallback_bearing(
    history: Sequence[HistorySnapshot], latest: HistorySnapshot
) -> float | None:
    if not history:
        return None
    last = history[-1]
    a = last.point
    b = latest.point
    if haversine_distance_m(a, b) <= 0.0:
        return None
    return initial_bearing_deg(a, b)


def resolve_motion(
    history: Sequence[HistorySnapshot],
    latest: HistorySnapshot | None,
    reported_speed_mps: float | None,
) -> MotionEstimate:
    """Resolve speed and bearing for a report against its prior history.

    `latest` is None when the report carried no timestamp; only the reported
    speed can be used then. The bearing is a hint for map rendering and must
    not be used to choose a route direction.
    """

    if latest is None:
        return MotionEstimate(
            speed_mps=pick_speed_mps(reported_speed_mps, None, reliable=False)
        )

    points = sorted([*history, latest], key=lambda s: s.timestamp_s)
    totals = accumulate_track(points)

    if totals.bearing_samples:
        bearing = weighted_circular_mean_deg(totals.bearing_samples)
    else:
        bearing = _fallback_bearing(history, latest)

    computed = totals.speed_mps
    return MotionEstimate(
        speed_mps=pick_speed_mps(
            reported_speed_mps, computed, reliable=totals.reliable
        ),
        bearing_deg=bearing,
        computed_speed_mps=computed,
        reliable=totals.reliable,
    )
