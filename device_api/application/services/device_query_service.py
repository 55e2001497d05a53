# Standard library imports
import logging
from typing import List

# Local application imports
from ...domain.models.device import Device, DeviceState
from ...domain.repositories.device_repository import DeviceRepository
from ...domain.results import DeviceError, Result, ResultHandler

logger = logging.getLogger(__name__)


class DeviceQueryService:
    """Read-only access to devices. No lifecycle rules, no version checks."""

    def __init__(self, device_repository: DeviceRepository) -> None:
        self.device_repository = device_repository

    async def get_by_id(self, device_id: str) -> Result[Device, DeviceError]:
        logger.info(f"Fetching device with ID {device_id}")
        device = await self.device_repository.find_by_id(device_id)
        if device is None:
            logger.warning(f"Device with ID {device_id} not found")
            return ResultHandler.fail(DeviceError.not_found(device_id))
        return ResultHandler.ok(device)

    async def get_all(self) -> List[Device]:
        logger.info("Fetching all devices")
        return await self.device_repository.find_all()

    async def get_by_brand(self, brand: str) -> List[Device]:
        logger.info(f"Fetching devices by brand: {brand}")
        return await self.device_repository.find_by_brand(brand)

    async def get_by_state(self, state: DeviceState) -> List[Device]:
        logger.info(f"Fetching devices by state: {DeviceState(state).value}")
        return await self.device_repository.find_by_state(state)
