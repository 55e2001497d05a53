from typing import TYPE_CHECKING
from ...domain.repositories.device_repository import DeviceRepository
from ...infrastructure.db.memory_device_repository import InMemoryDeviceRepository
from ...infrastructure.db.mongo_device_repository import MongoDeviceRepository

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class RepositoryProvider:
    """Repository registration provider - wires domain interfaces to infrastructure implementations"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register the device repository for the configured backend.
        """
        if container.settings.device_store_backend == "memory":
            container.register_singleton(DeviceRepository, InMemoryDeviceRepository())
            return

        container.register_singleton(
            DeviceRepository,
            MongoDeviceRepository(device_collection=container.get("device_collection"))
        )
