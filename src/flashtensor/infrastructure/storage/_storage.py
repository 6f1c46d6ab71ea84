"""
Device-tagged shared storage.

`Storage` is a handle to a fixed-size, one-dimensional buffer allocated by a
device backend. Handles are cheap: `copy.copy(storage)` produces a second
handle onto the same buffer (a reference-count increment), which is how many
tensors come to share one allocation. The buffer is released through the
backend that produced it when the last handle is garbage-collected.

Design notes
------------
- The backend is resolved once, at construction, from the allocator
  registry (or injected explicitly). No other code path branches on the
  device type.
- `Storage` does not interpret layout; shapes and strides live on `Tensor`.
- Flat element access (`storage[i]`) is checked against `size`; `data`
  exposes the raw buffer for bulk access and performs no checking.
"""

from __future__ import annotations

import operator
import weakref
from typing import Any, Optional

import numpy as np

from ...domain._errors import AllocationFailureError, IndexOutOfBoundsError
from ...domain._storage import IStorage
from ...domain.device._allocator_protocol import IDeviceAllocator
from ...domain.device._device import Device, DeviceSpec
from ._allocators import get_allocator
from ._shared_buffer import _SharedBuffer


class Storage(IStorage):
    """
    Shared, device-tagged buffer of `size` elements.

    Parameters
    ----------
    size : int
        Number of elements to allocate.
    device : Device | DeviceType | str, optional
        Target device. Defaults to "cpu".
    dtype : np.dtype, optional
        Element dtype. Defaults to np.float32.
    allocator : Optional[IDeviceAllocator], optional
        Backend to allocate from. When omitted, the backend registered for
        the device type is used.

    Raises
    ------
    InvalidDeviceError
        If `device` is not recognized or no backend is registered for it.
    AllocationFailureError
        If the backend cannot provide the buffer.
    """

    def __init__(
        self,
        size: int,
        device: DeviceSpec = "cpu",
        *,
        dtype: np.dtype = np.float32,
        allocator: Optional[IDeviceAllocator] = None,
    ) -> None:
        dev = Device.resolve(device)
        if allocator is None:
            allocator = get_allocator(dev.type)

        try:
            handle = allocator.allocate(size, np.dtype(dtype))
        except AllocationFailureError:
            raise
        except (MemoryError, ValueError) as exc:
            raise AllocationFailureError(size, str(dev), str(exc)) from exc
        if not isinstance(handle, np.ndarray) or handle.shape != (int(size),):
            allocator.release(handle)
            raise AllocationFailureError(
                size, str(dev), "backend returned a buffer of the wrong shape"
            )

        self._device = dev
        self._size = int(size)
        self._dtype = handle.dtype
        self._attach(_SharedBuffer(allocator=allocator, handle=handle))

    def _attach(self, block: _SharedBuffer) -> None:
        block.incref()
        self._block = block
        self._finalizer = weakref.finalize(self, block.decref)

    @property
    def device(self) -> Device:
        return self._device

    @property
    def size(self) -> int:
        return self._size

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def allocator(self) -> IDeviceAllocator:
        """Backend that owns the buffer."""
        return self._block.allocator

    @property
    def data(self) -> np.ndarray:
        """
        Return the raw one-dimensional buffer.

        The array aliases the allocation: writes are visible through every
        handle and tensor sharing this storage. Callers must stay within
        `[0, size)`.
        """
        return self._block.handle

    @property
    def use_count(self) -> int:
        """Number of live `Storage` handles sharing this buffer."""
        return self._block.refcount

    def shares_buffer_with(self, other: "Storage") -> bool:
        """Return True if `other` is a handle onto the same allocation."""
        return self._block is getattr(other, "_block", None)

    def _check_pos(self, pos: Any) -> int:
        p = operator.index(pos)
        if p < 0 or p >= self._size:
            raise IndexOutOfBoundsError(p, self._size)
        return p

    def __getitem__(self, pos: int) -> Any:
        return self._block.handle[self._check_pos(pos)]

    def __setitem__(self, pos: int, value: Any) -> None:
        self._block.handle[self._check_pos(pos)] = value

    def __len__(self) -> int:
        return self._size

    def __copy__(self) -> "Storage":
        # New handle, same buffer.
        other = self.__class__.__new__(self.__class__)
        other._device = self._device
        other._size = self._size
        other._dtype = self._dtype
        other._attach(self._block)
        return other

    def __deepcopy__(self, memo: dict) -> "Storage":
        other = self.__class__(
            self._size, self._device, dtype=self._dtype, allocator=self.allocator
        )
        other.data[...] = self.data
        memo[id(self)] = other
        return other

    def __repr__(self) -> str:
        return (
            f"Storage(size={self._size}, device={self._device}, "
            f"dtype={self._dtype}, use_count={self.use_count})"
        )
