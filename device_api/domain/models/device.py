# Standard library imports
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class DeviceState(str, Enum):
    """Lifecycle states a device can be in"""
    AVAILABLE = "AVAILABLE"
    IN_USE = "IN_USE"
    INACTIVE = "INACTIVE"


@dataclass
class Device:
    """
    Pure domain model for Device entity.

    A managed resource record. The identifier is assigned by the store on
    insert; creation_time is set once at creation and version is bumped by
    the store on every accepted write.
    """
    id: Optional[str]
    name: str
    brand: str
    state: DeviceState
    creation_time: datetime
    version: int = 0

    def __post_init__(self) -> None:
        """Business validations"""
        if not self.name or len(self.name.strip()) < 1:
            raise ValueError("Device name is required")
        if not self.brand or len(self.brand.strip()) < 1:
            raise ValueError("Device brand is required")
        if not isinstance(self.state, DeviceState):
            self.state = DeviceState(self.state)
        if self.version < 0:
            raise ValueError("Device version cannot be negative")

    @property
    def is_in_use(self) -> bool:
        return self.state == DeviceState.IN_USE


@dataclass(frozen=True)
class DeviceChanges:
    """
    Sparse set of proposed field assignments.

    A field left as None means "no change". Only name, brand and state can
    ever be targeted; identity, creation_time and version are not members.
    """
    name: Optional[str] = None
    brand: Optional[str] = None
    state: Optional[DeviceState] = None

    def requested(self) -> Dict[str, Any]:
        """Return only the fields the caller asked to change"""
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if getattr(self, field.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.requested()

    def apply_to(self, device: Device) -> Device:
        """Return a copy of device with the requested fields overwritten"""
        requested = self.requested()
        return Device(
            id=device.id,
            name=requested.get("name", device.name),
            brand=requested.get("brand", device.brand),
            state=requested.get("state", device.state),
            creation_time=device.creation_time,
            version=device.version,
        )
