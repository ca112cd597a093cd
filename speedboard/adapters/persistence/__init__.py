from .http_gtfs_static_repository import HttpGtfsStaticRepository
from .in_memory_vehicle_history_store import InMemoryVehicleHistoryStore
from .local_gtfs_repository import LocalGtfsRepository

__all__ = [
    "HttpGtfsStaticRepository",
    "InMemoryVehicleHistoryStore",
    "LocalGtfsRepository",
]
