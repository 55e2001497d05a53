from .device import Device, DeviceChanges, DeviceState

__all__ = ["Device", "DeviceChanges", "DeviceState"]
