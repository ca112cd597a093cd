from .gtfs_repository import IGtfsRepository
from .realtime_feed_provider import IRealtimeFeedProvider
from .vehicle_history_store import IVehicleHistoryStore

__all__ = [
    "IGtfsRepository",
    "IRealtimeFeedProvider",
    "IVehicleHistoryStore",
]
