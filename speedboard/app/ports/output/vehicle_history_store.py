from __future__ import annotations

from abc import ABC, abstractmethod

from speedboard.domain.models.history import HistorySnapshot, VehicleKey


class IVehicleHistoryStore(ABC):
    """Bounded per-vehicle position history shared across polling cycles."""

    @abstractmethod
    def get(self, key: VehicleKey) -> tuple[HistorySnapshot, ...]:
        """Return the vehicle's snapshots, oldest first (empty if unknown)."""

    @abstractmethod
    def append(self, key: VehicleKey, snapshot: HistorySnapshot) -> None:
        """Record a snapshot, dropping the oldest beyond the capacity."""

    @abstractmethod
    def evict_stale(self, now_s: float) -> int:
        """Drop vehicles whose newest snapshot is older than the TTL; return count."""
