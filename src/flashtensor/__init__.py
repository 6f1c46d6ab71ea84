"""
flashtensor: a minimal strided tensor memory/view layer.

A `Storage` is a shared, device-tagged buffer; a `Tensor` is a
(shape, strides, offset) view over one. Views and copies alias storage;
`clone()` materializes an independent contiguous copy.

Example
-------
>>> from flashtensor import Tensor
>>> a = Tensor((2, 3))
>>> a[1, 2] = 5.0
>>> a.strides
(3, 1)
>>> a.transpose(0, 1).is_contiguous
False
"""

import logging

from .domain import (
    FlashTensorError,
    InvalidDeviceError,
    AllocationFailureError,
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidDimensionError,
    InvalidViewError,
    InvalidShapeError,
    MovedFromTensorError,
    Device,
    DeviceType,
    IDeviceAllocator,
)
from .infrastructure import (
    RuntimeConfig,
    get_config,
    set_check_bounds,
    bounds_checking,
    Storage,
    CpuAllocator,
    MockCudaAllocator,
    register_allocator,
    unregister_allocator,
    get_allocator,
    Tensor,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FlashTensorError",
    "InvalidDeviceError",
    "AllocationFailureError",
    "DimensionMismatchError",
    "IndexOutOfBoundsError",
    "InvalidDimensionError",
    "InvalidViewError",
    "InvalidShapeError",
    "MovedFromTensorError",
    "Device",
    "DeviceType",
    "IDeviceAllocator",
    "RuntimeConfig",
    "get_config",
    "set_check_bounds",
    "bounds_checking",
    "Storage",
    "CpuAllocator",
    "MockCudaAllocator",
    "register_allocator",
    "unregister_allocator",
    "get_allocator",
    "Tensor",
]
