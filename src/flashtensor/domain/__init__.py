from ._errors import (
    FlashTensorError,
    InvalidDeviceError,
    AllocationFailureError,
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidDimensionError,
    InvalidViewError,
    InvalidShapeError,
    MovedFromTensorError,
)
from ._storage import IStorage
from ._tensor import ITensor
from .device import Device, DeviceType, DeviceLike, IDeviceAllocator

__all__ = [
    FlashTensorError.__name__,
    InvalidDeviceError.__name__,
    AllocationFailureError.__name__,
    DimensionMismatchError.__name__,
    IndexOutOfBoundsError.__name__,
    InvalidDimensionError.__name__,
    InvalidViewError.__name__,
    InvalidShapeError.__name__,
    MovedFromTensorError.__name__,
    IStorage.__name__,
    ITensor.__name__,
    Device.__name__,
    DeviceType.__name__,
    DeviceLike.__name__,
    IDeviceAllocator.__name__,
]
