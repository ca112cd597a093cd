from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from speedboard.app.ports.output import IVehicleHistoryStore
from speedboard.domain.constants import MAX_HISTORY, VEHICLE_CACHE_TTL_SECONDS
from speedboard.domain.models.history import HistorySnapshot, VehicleKey


@dataclass(slots=True)
class InMemoryVehicleHistoryStore(IVehicleHistoryStore):
    """Per-vehicle ring of recent positions, held in process memory.

    Timestamps within one vehicle's history never decrease: a snapshot older
    than the newest stored one is ignored, and one with the same timestamp
    replaces it (the same report seen by two polls).

    Not thread-safe; callers serialize access per cycle.
    """

    max_history: int = MAX_HISTORY
    ttl_s: float = VEHICLE_CACHE_TTL_SECONDS

    _entries: dict[VehicleKey, deque[HistorySnapshot]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: VehicleKey) -> tuple[HistorySnapshot, ...]:
        ring = self._entries.get(key)
        return tuple(ring) if ring else ()

    def append(self, key: VehicleKey, snapshot: HistorySnapshot) -> None:
        ring = self._entries.get(key)
        if ring is None:
            ring = deque(maxlen=self.max_history)
            self._entries[key] = ring

        if ring:
            newest = ring[-1]
            if snapshot.timestamp_s < newest.timestamp_s:
                return
            if snapshot.timestamp_s == newest.timestamp_s:
                ring[-1] = snapshot
                return

        ring.append(snapshot)

    def evict_stale(self, now_s: float) -> int:
        stale = [
            key
            for key, ring in self._entries.items()
            if not ring or now_s - ring[-1].timestamp_s > self.ttl_s
        ]
        for key in stale:
            del self._entries[key]
        return len(stale)
