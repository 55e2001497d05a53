# Standard library imports
import threading
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional

# Local application imports
from ...domain.repositories.device_repository import DeviceRepository, DeviceMutator
from ...domain.models.device import Device, DeviceState
from ...domain.results import DeviceError, Result, ResultHandler


class InMemoryDeviceRepository(DeviceRepository):
    """
    Process-local implementation of DeviceRepository.

    Records live in an insertion-ordered dict. The lock is held only around
    each check-and-write, never across an await, so every conditional write
    is a single atomic compare-and-swap for callers on any thread or task.
    Stored and returned devices are copies; callers cannot alias records.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._records: Dict[str, Device] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    async def insert(self, device: Device) -> Device:
        if not device:
            raise ValueError("Device cannot be None")

        with self._lock:
            device_id = self._id_factory()
            while device_id in self._records:
                device_id = self._id_factory()
            stored = replace(device, id=device_id, version=0)
            self._records[device_id] = stored
            return replace(stored)

    async def find_by_id(self, device_id: str) -> Optional[Device]:
        with self._lock:
            device = self._records.get(device_id)
            return replace(device) if device is not None else None

    async def find_all(self) -> List[Device]:
        return self._scan(lambda device: True)

    async def find_by_brand(self, brand: str) -> List[Device]:
        return self._scan(lambda device: device.brand == brand)

    async def find_by_state(self, state: DeviceState) -> List[Device]:
        state = DeviceState(state)
        return self._scan(lambda device: device.state == state)

    async def conditional_update(
        self,
        device_id: str,
        expected_version: int,
        mutator: DeviceMutator,
    ) -> Result[Device, DeviceError]:
        with self._lock:
            current = self._records.get(device_id)
            if current is None:
                return ResultHandler.fail(DeviceError.not_found(device_id))
            if current.version != expected_version:
                return ResultHandler.fail(DeviceError.version_conflict(device_id))

            mutated = mutator(replace(current))
            stored = replace(
                current,
                name=mutated.name,
                brand=mutated.brand,
                state=DeviceState(mutated.state),
                version=expected_version + 1,
            )
            self._records[device_id] = stored
            return ResultHandler.ok(replace(stored))

    async def conditional_delete(
        self,
        device_id: str,
        expected_version: int,
    ) -> Result[None, DeviceError]:
        with self._lock:
            current = self._records.get(device_id)
            if current is None:
                return ResultHandler.fail(DeviceError.not_found(device_id))
            if current.version != expected_version:
                return ResultHandler.fail(DeviceError.version_conflict(device_id))
            del self._records[device_id]
            return ResultHandler.ok(None)

    def _scan(self, predicate: Callable[[Device], bool]) -> List[Device]:
        with self._lock:
            return [replace(device) for device in self._records.values() if predicate(device)]
