from typing import TYPE_CHECKING
from ...infrastructure.db.mongo_connection import get_device_collection

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class DatabaseProvider:
    """Centralized database connection provider - single source of truth for all DB connections"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register the device collection in the container.
        The memory backend needs no connection, so nothing is registered for it.
        """
        if container.settings.device_store_backend != "mongo":
            return

        container.register_singleton("device_collection", get_device_collection())
