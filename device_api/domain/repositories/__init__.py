from .device_repository import DeviceMutator, DeviceRepository

__all__ = ["DeviceMutator", "DeviceRepository"]
