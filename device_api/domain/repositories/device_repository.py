from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..models.device import Device, DeviceState
from ..results import DeviceError, Result


DeviceMutator = Callable[[Device], Device]


class DeviceRepository(ABC):
    """
    Repository interface - defines contract for device data access.

    Conditional writes must be a single atomic compare-and-swap on the
    version field: of two writers holding the same expected version, exactly
    one succeeds and the other gets a VERSION_CONFLICT failure.

    Backend failures are raised as StorageFaultError, never returned.
    """

    @abstractmethod
    async def insert(self, device: Device) -> Device:
        """Persist a new device; returns it with an assigned ID and version 0"""
        pass

    @abstractmethod
    async def find_by_id(self, device_id: str) -> Optional[Device]:
        """Find device by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Device]:
        """Return every stored device"""
        pass

    @abstractmethod
    async def find_by_brand(self, brand: str) -> List[Device]:
        """Find devices whose brand equals the given value exactly"""
        pass

    @abstractmethod
    async def find_by_state(self, state: DeviceState) -> List[Device]:
        """Find devices currently in the given state"""
        pass

    @abstractmethod
    async def conditional_update(
        self,
        device_id: str,
        expected_version: int,
        mutator: DeviceMutator,
    ) -> Result[Device, DeviceError]:
        """
        Apply mutator to the stored device if its version is expected_version.

        Only name, brand and state of the mutated device are persisted. The
        stored version becomes expected_version + 1.

        Returns:
            Success with the updated device, or Failure with a NOT_FOUND or
            VERSION_CONFLICT error
        """
        pass

    @abstractmethod
    async def conditional_delete(
        self,
        device_id: str,
        expected_version: int,
    ) -> Result[None, DeviceError]:
        """Remove the device if its version is expected_version"""
        pass
