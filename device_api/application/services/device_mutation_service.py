# Standard library imports
import logging
from typing import Optional

# Local application imports
from ...domain.models.device import Device, DeviceChanges, DeviceState
from ...domain.policies.lifecycle_policy import Denied, LifecyclePolicy
from ...domain.repositories.device_repository import DeviceRepository
from ...domain.results import DeviceError, ErrorKind, Result, ResultHandler
from ...utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class DeviceMutationService:
    """
    Coordinates every write against the device store.

    Each update or delete is a read, a lifecycle check against what was read,
    and a conditional write pinned to the version that was read. A version
    conflict is retried at most max_conflict_retries times, each attempt
    starting from a fresh read and a fresh authorization. NOT_FOUND and
    ILLEGAL_OPERATION are final. Storage faults propagate untouched.
    """

    def __init__(
        self,
        device_repository: DeviceRepository,
        lifecycle_policy: LifecyclePolicy,
        max_conflict_retries: int = 0,
    ) -> None:
        if max_conflict_retries < 0:
            raise ValueError("max_conflict_retries cannot be negative")
        self.device_repository = device_repository
        self.lifecycle_policy = lifecycle_policy
        self.max_conflict_retries = max_conflict_retries

    async def create(
        self,
        name: str,
        brand: str,
        state: DeviceState = DeviceState.AVAILABLE,
    ) -> Result[Device, DeviceError]:
        """
        Create a new device

        Args:
            name: Device name
            brand: Device brand
            state: Initial state

        Returns:
            Success with the stored device (ID assigned, version 0)
        """
        logger.info(f"Creating new device: name={name}, brand={brand}, state={DeviceState(state).value}")
        new_device = Device(
            id=None,
            name=name,
            brand=brand,
            state=DeviceState(state),
            creation_time=utc_now(),
            version=0,
        )
        saved_device = await self.device_repository.insert(new_device)
        logger.debug(f"Device created with ID {saved_device.id}")
        return ResultHandler.ok(saved_device)

    async def update(
        self,
        device_id: str,
        changes: DeviceChanges,
        expected_version: Optional[int] = None,
    ) -> Result[Device, DeviceError]:
        """
        Apply a partial update to a device

        Args:
            device_id: ID of the device
            changes: Fields to overwrite; None fields are left as they are
            expected_version: Version the caller last saw. When given, the
                update is pinned to it and never retried.

        Returns:
            Success with the updated device, or Failure with NOT_FOUND,
            ILLEGAL_OPERATION or VERSION_CONFLICT
        """
        logger.info(f"Updating device with ID {device_id}")
        attempts = 1 if expected_version is not None else self.max_conflict_retries + 1

        for attempt in range(1, attempts + 1):
            current = await self.device_repository.find_by_id(device_id)
            if current is None:
                logger.warning(f"Device with ID {device_id} not found for update")
                return ResultHandler.fail(DeviceError.not_found(device_id))

            if expected_version is not None and current.version != expected_version:
                logger.warning(
                    f"Stale update of device {device_id}: caller saw version {expected_version}, "
                    f"store has {current.version}"
                )
                return ResultHandler.fail(DeviceError.version_conflict(device_id))

            decision = self.lifecycle_policy.authorize(current.state, changes)
            if isinstance(decision, Denied):
                logger.warning(f"Rejected update of device {device_id} in state {current.state.value}: {decision.reason}")
                return ResultHandler.fail(DeviceError.illegal_operation(decision.reason))

            result = await self.device_repository.conditional_update(
                device_id, current.version, changes.apply_to
            )
            if ResultHandler.is_success(result):
                logger.debug(f"Device updated: ID={device_id}, version={result.value.version}")
                return result
            if result.error.kind != ErrorKind.VERSION_CONFLICT:
                return result

            logger.debug(f"Version conflict updating device {device_id} (attempt {attempt}/{attempts})")

        logger.warning(f"Giving up on update of device {device_id} after {attempts} conflicting attempt(s)")
        return ResultHandler.fail(DeviceError.version_conflict(device_id))

    async def delete(
        self,
        device_id: str,
        expected_version: Optional[int] = None,
    ) -> Result[None, DeviceError]:
        """
        Delete a device. Devices currently in use cannot be deleted.

        Returns:
            Success(None), or Failure with NOT_FOUND, ILLEGAL_OPERATION or
            VERSION_CONFLICT
        """
        logger.info(f"Attempting to delete device with ID {device_id}")
        attempts = 1 if expected_version is not None else self.max_conflict_retries + 1

        for attempt in range(1, attempts + 1):
            current = await self.device_repository.find_by_id(device_id)
            if current is None:
                logger.warning(f"Device with ID {device_id} not found for deletion")
                return ResultHandler.fail(DeviceError.not_found(device_id))

            if expected_version is not None and current.version != expected_version:
                logger.warning(
                    f"Stale delete of device {device_id}: caller saw version {expected_version}, "
                    f"store has {current.version}"
                )
                return ResultHandler.fail(DeviceError.version_conflict(device_id))

            decision = self.lifecycle_policy.authorize_delete(current.state)
            if isinstance(decision, Denied):
                logger.warning(f"Attempt to delete device in use - ID {device_id}")
                return ResultHandler.fail(DeviceError.illegal_operation(decision.reason))

            result = await self.device_repository.conditional_delete(device_id, current.version)
            if ResultHandler.is_success(result):
                logger.info(f"Device with ID {device_id} successfully deleted")
                return result
            if result.error.kind != ErrorKind.VERSION_CONFLICT:
                return result

            logger.debug(f"Version conflict deleting device {device_id} (attempt {attempt}/{attempts})")

        logger.warning(f"Giving up on delete of device {device_id} after {attempts} conflicting attempt(s)")
        return ResultHandler.fail(DeviceError.version_conflict(device_id))
