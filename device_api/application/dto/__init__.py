from .device_dto import (
    DeviceCreateRequest,
    DeviceUpdateRequest,
    DeviceResponse,
    DeviceResponseList,
    ErrorResponse,
)

__all__ = [
    "DeviceCreateRequest",
    "DeviceUpdateRequest",
    "DeviceResponse",
    "DeviceResponseList",
    "ErrorResponse",
]
