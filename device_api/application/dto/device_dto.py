from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.models.device import Device, DeviceChanges, DeviceState


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class DeviceCreateRequest(BaseModel):
    """DTO for device creation request"""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100, examples=["iPhone 14"])
    brand: str = Field(min_length=1, max_length=50, examples=["Apple"])
    state: DeviceState = DeviceState.AVAILABLE

    @field_validator("name", "brand")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class DeviceUpdateRequest(BaseModel):
    """DTO for device update request (partial updates allowed, null means unchanged)"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100, examples=["Galaxy S23"])
    brand: Optional[str] = Field(default=None, min_length=1, max_length=50, examples=["Samsung"])
    state: Optional[DeviceState] = Field(default=None, examples=["IN_USE"])

    @field_validator("name", "brand")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)

    def to_changes(self) -> DeviceChanges:
        return DeviceChanges(name=self.name, brand=self.brand, state=self.state)


class DeviceResponse(BaseModel):
    """DTO for device response"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    brand: str
    state: DeviceState
    creation_time: datetime = Field(alias="creationTime")
    version: int

    @classmethod
    def from_device(cls, device: Device) -> "DeviceResponse":
        return cls(
            id=device.id or "",
            name=device.name,
            brand=device.brand,
            state=device.state,
            creation_time=device.creation_time,
            version=device.version,
        )


class DeviceResponseList(BaseModel):
    """DTO wrapping the full device listing"""
    devices: List[DeviceResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Uniform body returned for every error status"""
    timestamp: str
    status: int
    path: str
    message: str
    details: List[str] = Field(default_factory=list)
