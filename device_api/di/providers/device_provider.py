from typing import TYPE_CHECKING
from ...domain.policies.lifecycle_policy import LifecyclePolicy
from ...domain.repositories.device_repository import DeviceRepository
from ...application.services.device_mutation_service import DeviceMutationService
from ...application.services.device_query_service import DeviceQueryService

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class DeviceProvider:
    """Device service provider - registers the policy and the device services"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register device services.
        Services are created on-demand via factories; the policy is stateless and shared.
        """
        container.register_singleton(LifecyclePolicy, LifecyclePolicy())

        container.register_factory(
            DeviceQueryService,
            lambda: DeviceQueryService(
                device_repository=container.get(DeviceRepository),
            )
        )

        container.register_factory(
            DeviceMutationService,
            lambda: DeviceMutationService(
                device_repository=container.get(DeviceRepository),
                lifecycle_policy=container.get(LifecyclePolicy),
                max_conflict_retries=container.settings.device_update_max_retries,
            )
        )
