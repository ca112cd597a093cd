from __future__ import annotations

from abc import ABC, abstractmethod

from speedboard.domain.models.gtfs import GtfsStaticData


class IGtfsRepository(ABC):
    """Port for static GTFS reference data (route names and shapes)."""

    @abstractmethod
    async def load_static_data(self) -> GtfsStaticData:
        """Return the current data; refreshing implementations may return stale data."""
