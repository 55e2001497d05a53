from .device_mutation_service import DeviceMutationService
from .device_query_service import DeviceQueryService

__all__ = ["DeviceMutationService", "DeviceQueryService"]
