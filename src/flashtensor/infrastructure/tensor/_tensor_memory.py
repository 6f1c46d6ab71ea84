"""
Tensor memory mixin: copies, host I/O and factories.

This module defines `TensorMemoryMixin`, which groups the operations that read
or write whole tensors or allocate new storage:

- `clone`            : contiguous deep copy on an independent storage
- `contiguous`       : `self` when already contiguous, else `clone()`
- `to`               : contiguous copy on another device
- `to_numpy`         : host copy in logical layout
- `copy_from_numpy`  : write a same-shaped host array into the tensor
- `fill_`            : set every logical element
- `zeros` / `full` / `from_numpy` : factory constructors

Design notes
------------
- Whole-tensor access goes through `_flat_positions()`, an integer array of
  shape `self.shape` holding the flat storage position of each logical
  element. Strided reads and writes then become a single NumPy gather or
  scatter on `storage.data`, for any stride pattern.
- The positions are always range-checked before use: NumPy would otherwise
  wrap negative positions around silently.
- Methods assume the host class provides `shape`, `strides`, `offset`,
  `storage`, `device`, `dtype`, `is_contiguous` and the constructor
  `cls(shape, device, dtype=..., allocator=...)`.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Type, TypeVar

import numpy as np

from ...domain._errors import IndexOutOfBoundsError, InvalidShapeError
from ...domain.device._allocator_protocol import IDeviceAllocator
from ...domain.device._device import Device, DeviceSpec

T = TypeVar("T", bound="TensorMemoryMixin")


class TensorMemoryMixin:
    """
    Mixin implementing copies, host I/O and factory constructors.
    """

    def _flat_positions(self) -> np.ndarray:
        """
        Return the flat storage position of every logical element.

        Returns
        -------
        np.ndarray
            int64 array with shape `self.shape`.

        Raises
        ------
        IndexOutOfBoundsError
            If some position lies outside the storage (possible only for
            views created with bounds checking disabled).
        """
        shape = self.shape
        ndim = len(shape)
        positions = np.full(shape, self.offset, dtype=np.int64)
        for d, (n, s) in enumerate(zip(shape, self.strides)):
            steps = np.arange(n, dtype=np.int64) * s
            positions = positions + steps.reshape((1,) * d + (n,) + (1,) * (ndim - d - 1))

        size = self.storage.size
        if positions.size:
            lo, hi = int(positions.min()), int(positions.max())
            if lo < 0:
                raise IndexOutOfBoundsError(lo, size)
            if hi >= size:
                raise IndexOutOfBoundsError(hi, size)
        return positions

    # ------------------------------------------------------------------
    # Host I/O
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Copy the tensor's logical contents into a new host array.

        The result has shape `self.shape` and is independent of the storage.
        """
        gathered = self.storage.data[self._flat_positions()]
        return np.array(gathered, dtype=self.dtype).reshape(self.shape)

    def copy_from_numpy(self: T, arr: Any) -> T:
        """
        Write `arr` into this tensor's elements, honouring its strides.

        Raises
        ------
        InvalidShapeError
            If `arr` does not have exactly `self.shape`.
        """
        src = np.asarray(arr, dtype=self.dtype)
        if src.shape != self.shape:
            raise InvalidShapeError(
                src.shape, f"expected an array of shape {self.shape}"
            )
        self.storage.data[self._flat_positions()] = src
        return self

    def fill_(self: T, value: Any) -> T:
        """Set every logical element to `value` in place."""
        self.storage.data[self._flat_positions()] = value
        return self

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------
    def clone(self: T) -> T:
        """
        Return a deep copy with its own contiguous storage.

        The copy lives on the same device and comes from the same allocator.
        Its offset is 0 and its strides are row-major for `self.shape`, even
        when `self` is a non-contiguous view; the element at each multi-index
        keeps its multi-index.
        """
        storage = self.storage
        out = self.__class__(
            self.shape, storage.device, dtype=storage.dtype, allocator=storage.allocator
        )
        out.storage.data[...] = self.to_numpy().reshape(-1)
        return out

    def contiguous(self: T) -> T:
        """Return `self` if contiguous, otherwise a contiguous `clone()`."""
        if self.is_contiguous:
            return self
        return self.clone()

    def to(self: T, device: DeviceSpec) -> T:
        """
        Return this tensor on `device`.

        Returns `self` when already there; otherwise a contiguous copy whose
        storage comes from the backend registered for `device`.
        """
        dev = Device.resolve(device)
        if dev == self.device:
            return self
        out = self.__class__(self.shape, dev, dtype=self.dtype)
        out.storage.data[...] = self.to_numpy().reshape(-1)
        return out

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def full(
        cls: Type[T],
        shape: Sequence[int],
        value: Any,
        device: DeviceSpec = "cpu",
        *,
        dtype: np.dtype = np.float32,
        allocator: Optional[IDeviceAllocator] = None,
    ) -> T:
        """Create a contiguous tensor with every element set to `value`."""
        out = cls(shape, device, dtype=dtype, allocator=allocator)
        out.storage.data[...] = value
        return out

    @classmethod
    def zeros(
        cls: Type[T],
        shape: Sequence[int],
        device: DeviceSpec = "cpu",
        *,
        dtype: np.dtype = np.float32,
        allocator: Optional[IDeviceAllocator] = None,
    ) -> T:
        """
        Create a zero-filled contiguous tensor.

        Zeroes explicitly, since an injected allocator need not.
        """
        return cls.full(shape, 0, device, dtype=dtype, allocator=allocator)

    @classmethod
    def from_numpy(
        cls: Type[T],
        arr: Any,
        device: DeviceSpec = "cpu",
        *,
        dtype: Optional[np.dtype] = None,
    ) -> T:
        """
        Create a contiguous tensor holding a copy of `arr`.

        The dtype follows `arr` unless overridden.
        """
        src = np.asarray(arr)
        out = cls(src.shape, device, dtype=src.dtype if dtype is None else dtype)
        out.storage.data[...] = src.reshape(-1)
        return out
