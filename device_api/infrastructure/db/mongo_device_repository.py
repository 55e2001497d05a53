# Standard library imports
import logging
from typing import Optional, List, Dict, Any

# External package imports
from motor.motor_asyncio import AsyncIOMotorCollection
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

# Local application imports
from ...domain.repositories.device_repository import DeviceRepository, DeviceMutator
from ...domain.models.device import Device, DeviceState
from ...domain.constants import DeviceFields
from ...domain.results import DeviceError, Result, ResultHandler, StorageFaultError
from ...utils.datetime_utils import ensure_utc
from .mongo_connection import get_device_collection

logger = logging.getLogger(__name__)


def _to_object_id(device_id: str) -> Optional[ObjectId]:
    if not device_id:
        return None
    try:
        return ObjectId(device_id)
    except (InvalidId, TypeError):
        return None


class MongoDeviceRepository(DeviceRepository):
    """
    MongoDB implementation of DeviceRepository.

    Conditional writes filter on both _id and version, so MongoDB's
    single-document atomicity provides the compare-and-swap.
    """

    def __init__(self, device_collection: Optional[AsyncIOMotorCollection] = None) -> None:
        self.device_collection = device_collection if device_collection is not None else get_device_collection()

    async def ensure_indexes(self) -> None:
        """Create the indexes backing the brand and state scans"""
        try:
            await self.device_collection.create_index([(DeviceFields.BRAND, ASCENDING)])
            await self.device_collection.create_index([(DeviceFields.STATE, ASCENDING)])
        except PyMongoError as e:
            raise StorageFaultError(f"Error creating device indexes: {str(e)}", operation="ensure_indexes") from e

    async def insert(self, device: Device) -> Device:
        """Insert a new device document; MongoDB assigns the ObjectId"""
        if not device:
            raise ValueError("Device cannot be None")

        document = self._device_to_dict(device)
        document[DeviceFields.VERSION] = 0

        try:
            result = await self.device_collection.insert_one(document)
        except PyMongoError as e:
            raise StorageFaultError(f"Error inserting device: {str(e)}", operation="insert") from e

        document[DeviceFields.MONGO_ID] = result.inserted_id
        return self._document_to_device(document)

    async def find_by_id(self, device_id: str) -> Optional[Device]:
        """Find device by ID"""
        object_id = _to_object_id(device_id)
        if object_id is None:
            return None

        try:
            document = await self.device_collection.find_one({DeviceFields.MONGO_ID: object_id})
        except PyMongoError as e:
            raise StorageFaultError(f"Error finding device by ID: {str(e)}", operation="find_by_id") from e

        if document is None:
            return None
        return self._document_to_device(document)

    async def find_all(self) -> List[Device]:
        return await self._scan({}, operation="find_all")

    async def find_by_brand(self, brand: str) -> List[Device]:
        return await self._scan({DeviceFields.BRAND: brand}, operation="find_by_brand")

    async def find_by_state(self, state: DeviceState) -> List[Device]:
        return await self._scan({DeviceFields.STATE: DeviceState(state).value}, operation="find_by_state")

    async def conditional_update(
        self,
        device_id: str,
        expected_version: int,
        mutator: DeviceMutator,
    ) -> Result[Device, DeviceError]:
        """Compare-and-swap update on (_id, version)"""
        object_id = _to_object_id(device_id)
        if object_id is None:
            return ResultHandler.fail(DeviceError.not_found(device_id))

        try:
            document = await self.device_collection.find_one({DeviceFields.MONGO_ID: object_id})
            if document is None:
                return ResultHandler.fail(DeviceError.not_found(device_id))
            if document.get(DeviceFields.VERSION, 0) != expected_version:
                return ResultHandler.fail(DeviceError.version_conflict(device_id))

            mutated = mutator(self._document_to_device(document))
            updated_document = await self.device_collection.find_one_and_update(
                {DeviceFields.MONGO_ID: object_id, DeviceFields.VERSION: expected_version},
                {
                    "$set": self._mutable_fields(mutated),
                    "$inc": {DeviceFields.VERSION: 1},
                },
                return_document=ReturnDocument.AFTER,
            )
            if updated_document is None:
                # Lost the race between the read above and the swap
                return await self._miss_outcome(object_id, device_id)
        except PyMongoError as e:
            raise StorageFaultError(f"Error updating device: {str(e)}", operation="conditional_update") from e

        return ResultHandler.ok(self._document_to_device(updated_document))

    async def conditional_delete(
        self,
        device_id: str,
        expected_version: int,
    ) -> Result[None, DeviceError]:
        """Compare-and-swap delete on (_id, version)"""
        object_id = _to_object_id(device_id)
        if object_id is None:
            return ResultHandler.fail(DeviceError.not_found(device_id))

        try:
            delete_result = await self.device_collection.delete_one(
                {DeviceFields.MONGO_ID: object_id, DeviceFields.VERSION: expected_version}
            )
            if delete_result.deleted_count == 0:
                return await self._miss_outcome(object_id, device_id)
        except PyMongoError as e:
            raise StorageFaultError(f"Error deleting device: {str(e)}", operation="conditional_delete") from e

        return ResultHandler.ok(None)

    async def _miss_outcome(self, object_id: ObjectId, device_id: str) -> Result[Any, DeviceError]:
        """A filtered write matched nothing: tell a vanished document from a stale version"""
        still_exists = await self.device_collection.find_one(
            {DeviceFields.MONGO_ID: object_id},
            projection={DeviceFields.VERSION: 1},
        )
        if still_exists is None:
            return ResultHandler.fail(DeviceError.not_found(device_id))
        logger.debug(
            f"Version conflict on device {device_id}: stored version is "
            f"{still_exists.get(DeviceFields.VERSION)}"
        )
        return ResultHandler.fail(DeviceError.version_conflict(device_id))

    async def _scan(self, query: Dict[str, Any], operation: str) -> List[Device]:
        try:
            cursor = self.device_collection.find(query).sort(DeviceFields.MONGO_ID, ASCENDING)
            devices = []
            async for document in cursor:
                devices.append(self._document_to_device(document))
            return devices
        except PyMongoError as e:
            raise StorageFaultError(f"Error listing devices: {str(e)}", operation=operation) from e

    def _document_to_device(self, document: Dict[str, Any]) -> Device:
        """Convert MongoDB document to Device domain model"""
        if not document:
            raise StorageFaultError("Invalid document: document is None or empty")

        try:
            return Device(
                id=str(document[DeviceFields.MONGO_ID]),
                name=document[DeviceFields.NAME],
                brand=document[DeviceFields.BRAND],
                state=DeviceState(document[DeviceFields.STATE]),
                creation_time=ensure_utc(document[DeviceFields.CREATION_TIME]),
                version=int(document.get(DeviceFields.VERSION, 0)),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise StorageFaultError(f"Corrupt device document: {str(e)}") from e

    def _device_to_dict(self, device: Device) -> Dict[str, Any]:
        """Convert Device domain model to MongoDB document (without _id)"""
        device_dict: Dict[str, Any] = self._mutable_fields(device)
        device_dict[DeviceFields.CREATION_TIME] = device.creation_time
        return device_dict

    @staticmethod
    def _mutable_fields(device: Device) -> Dict[str, Any]:
        return {
            DeviceFields.NAME: device.name,
            DeviceFields.BRAND: device.brand,
            DeviceFields.STATE: DeviceState(device.state).value,
        }
