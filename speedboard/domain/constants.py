"""Fixed telemetry policy for speed resolution and aggregation."""

from __future__ import annotations

MPS_TO_KMH = 3.6

# Plausibility bounds for a resolved speed (reported or computed).
MIN_SPEED_KMH = 1.0
MAX_SPEED_KMH = 75.0

# Per-segment and aggregate time window filters.
MIN_TIME_DELTA_SECONDS = 8.0
MAX_TIME_DELTA_SECONDS = 120.0
MAX_TOTAL_TIME_SECONDS = 120.0
MAX_JUMP_METERS = 600.0

# Vehicle history.
MAX_HISTORY = 6
VEHICLE_CACHE_TTL_SECONDS = 300.0

# Route aggregation.
TRIM_FRACTION = 0.15
TRIM_MIN_SAMPLES = 6

MOVING_THRESHOLD_KMH = 2.0

EARTH_RADIUS_M = 6371000.0
