from __future__ import annotations

from abc import ABC, abstractmethod

from speedboard.domain.models.realtime import FeedSummary, VehicleFeed


class IRealtimeFeedProvider(ABC):
    """Port for the GTFS-Realtime feeds of one transit agency.

    Implementations raise FeedUnavailableError or FeedDecodeError rather than
    returning partial data.
    """

    @abstractmethod
    async def vehicle_positions(self) -> VehicleFeed:
        raise NotImplementedError

    @abstractmethod
    async def trip_updates_summary(self) -> FeedSummary:
        raise NotImplementedError

    @abstractmethod
    async def alerts_summary(self) -> FeedSummary:
        raise NotImplementedError
