from ._device import Device, DeviceType
from ._device_protocol import DeviceLike
from ._allocator_protocol import IDeviceAllocator

__all__ = [
    Device.__name__,
    DeviceType.__name__,
    DeviceLike.__name__,
    IDeviceAllocator.__name__,
]
