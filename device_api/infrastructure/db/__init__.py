from .mongo_connection import get_database, get_device_collection, close_mongo_connection
from .mongo_device_repository import MongoDeviceRepository
from .memory_device_repository import InMemoryDeviceRepository

__all__ = [
    "get_database",
    "get_device_collection",
    "close_mongo_connection",
    "MongoDeviceRepository",
    "InMemoryDeviceRepository",
]
