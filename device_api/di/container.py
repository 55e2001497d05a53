# Standard library imports
from typing import Optional

# Local application imports
from ..core.config import Settings
from .base_container import BaseContainer
from .providers import (
    DatabaseProvider,
    DeviceProvider,
    RepositoryProvider,
)


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.

    Registration order is important:
    1. Database connections (DatabaseProvider)
    2. Repositories (RepositoryProvider) - depends on database
    3. Services (DeviceProvider) - depend on repositories
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__(settings)
        self.setup()

    def setup(self) -> None:
        """
        Setup dependency registrations by composing all providers.
        Order matters: database → repositories → services
        """
        DatabaseProvider.register(self)
        RepositoryProvider.register(self)
        DeviceProvider.register(self)


# Global container instance (singleton pattern)
_container: DIContainer | None = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)

    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


def reset_container() -> None:
    """Forget the global container; the next get_container() builds a new one"""
    global _container
    _container = None
