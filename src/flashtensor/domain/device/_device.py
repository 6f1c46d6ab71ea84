"""
Device abstraction utilities.

This module defines lightweight abstractions for representing computation
devices (CPU and CUDA GPUs) in a backend-agnostic way. It provides:

- `DeviceType`: an enumeration of supported device categories
- `Device`: a concrete device descriptor that validates and normalizes
  user-facing device strings such as "cpu", "cuda" or "cuda:0"

The design avoids backend-specific dependencies; allocation is handled
by the allocators registered in the infrastructure layer.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Union

from .._errors import InvalidDeviceError


class DeviceType(Enum):
    """
    Enumeration of supported device categories.

    Attributes
    ----------
    CPU : DeviceType
        Host memory.
    CUDA : DeviceType
        CUDA device memory (simulated by the default backend).
    """

    CPU = "cpu"
    CUDA = "cuda"


DeviceSpec = Union["Device", DeviceType, str]


class Device:
    """
    Concrete computation device descriptor.

    Parameters
    ----------
    device : str
        Device identifier string. Must be one of:
        - "cpu"
        - "cuda" (shorthand for "cuda:0")
        - "cuda:<index>", where <index> is a non-negative integer

    Raises
    ------
    InvalidDeviceError
        If the provided device string does not match the supported formats.

    Notes
    -----
    `__slots__` keeps instances small and immutable in practice; devices are
    compared and hashed by `(type, index)`.
    """

    __slots__ = ("type", "index")

    _CUDA_PATTERN = re.compile(r"^cuda(?::(\d+))?$")

    def __init__(self, device: str):
        if not isinstance(device, str):
            raise InvalidDeviceError(device, "expected a device string")
        if device == "cpu":
            self.type = DeviceType.CPU
            self.index = None
        else:
            m = self._CUDA_PATTERN.match(device)
            if not m:
                raise InvalidDeviceError(
                    device, "expected 'cpu', 'cuda' or 'cuda:<index>'"
                )
            self.type = DeviceType.CUDA
            self.index = int(m.group(1) or 0)

    @classmethod
    def resolve(cls, device: DeviceSpec) -> "Device":
        """
        Normalize a user-supplied device value into a `Device`.

        Parameters
        ----------
        device : Device | DeviceType | str
            A ready `Device`, a bare `DeviceType` (index 0 for CUDA), or a
            device string.

        Returns
        -------
        Device

        Raises
        ------
        InvalidDeviceError
            If `device` is of any other type or an unsupported string.
        """
        if isinstance(device, Device):
            return device
        if isinstance(device, DeviceType):
            return cls(device.value)
        if isinstance(device, str):
            return cls(device)
        raise InvalidDeviceError(device, "expected Device, DeviceType or str")

    def __str__(self) -> str:
        return "cpu" if self.type is DeviceType.CPU else f"cuda:{self.index}"

    def __repr__(self) -> str:
        return f"Device('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return (self.type, self.index) == (other.type, other.index)

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        """Return True if this device is the host CPU."""
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        """Return True if this device is a CUDA GPU."""
        return self.type is DeviceType.CUDA
