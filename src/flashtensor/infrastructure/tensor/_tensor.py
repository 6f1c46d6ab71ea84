"""
Concrete strided Tensor implementation.

A `Tensor` is a (shape, strides, offset) view over a `Storage` handle. It never
owns a buffer directly; every tensor holds its own `Storage` handle, and
handles onto the same allocation share it. Views, copies and sub-tensors are
therefore cheap metadata operations, while `clone()` is the one operation that
materializes new memory.

Construction
------------
- `Tensor(shape, device)` allocates a fresh storage and lays it out row-major.
  Such a tensor is contiguous by construction.
- `Tensor.from_storage(storage, shape, strides, offset)` builds a view over an
  existing storage. Contiguity is derived from the supplied strides. With
  bounds checking enabled (see `flashtensor.infrastructure._config`) the
  layout is validated against the storage size.

Copy semantics
--------------
- `copy.copy(t)` and `t.assign(other)` share storage (aliasing).
- `Tensor.move(t)` and `t.move_assign(other)` transfer the storage handle and
  leave the source moved-from.
- `t.clone()` / `copy.deepcopy(t)` produce an independent contiguous copy.

Element access
--------------
`t[i, j, ...]` reads and writes a single element. The flat position is
`offset + sum(index[d] * strides[d])`.
"""

from __future__ import annotations

import copy
import operator
from typing import Any, Optional, Sequence

import numpy as np

from ...domain._errors import (
    DimensionMismatchError,
    InvalidViewError,
    MovedFromTensorError,
)
from ...domain._tensor import ITensor
from ...domain.device._allocator_protocol import IDeviceAllocator
from ...domain.device._device import Device, DeviceSpec
from .._config import get_config
from ..storage._storage import Storage
from ._layout import (
    check_contiguous,
    compute_size,
    compute_strides,
    flat_offset,
    normalize_shape,
    reachable_range,
)
from ._shape_and_indexing import TensorShapeAndIndexingMixin
from ._tensor_memory import TensorMemoryMixin


class Tensor(TensorMemoryMixin, TensorShapeAndIndexingMixin, ITensor):
    """
    Strided view over a shared, device-tagged storage.

    Parameters
    ----------
    shape : Sequence[int]
        Tensor shape. The empty shape describes a scalar with one element.
    device : Device | DeviceType | str, optional
        Target device for the fresh storage. Defaults to "cpu".
    dtype : np.dtype, optional
        Element dtype. Defaults to np.float32.
    allocator : Optional[IDeviceAllocator], optional
        Backend override; the registered backend for `device` is used when
        omitted.

    Raises
    ------
    InvalidShapeError
        If `shape` has negative dimensions.
    InvalidDeviceError
        If `device` cannot be resolved to a backend.
    AllocationFailureError
        If the backend cannot provide the buffer.
    """

    def __init__(
        self,
        shape: Sequence[int],
        device: DeviceSpec = "cpu",
        *,
        dtype: np.dtype = np.float32,
        allocator: Optional[IDeviceAllocator] = None,
    ) -> None:
        dims = normalize_shape(shape)
        self._storage: Optional[Storage] = Storage(
            compute_size(dims), device, dtype=dtype, allocator=allocator
        )
        self._shape = dims
        self._strides = compute_strides(dims)
        self._offset = 0
        # Row-major by construction; no need to run the general check.
        self._is_contiguous = True

    @classmethod
    def from_storage(
        cls,
        storage: Storage,
        shape: Sequence[int],
        strides: Sequence[int],
        offset: int = 0,
        *,
        check: Optional[bool] = None,
    ) -> "Tensor":
        """
        Construct a view over an existing storage.

        Parameters
        ----------
        storage : Storage
            Storage to view. The tensor takes its own handle onto it; the
            caller's handle stays valid.
        shape : Sequence[int]
            View shape.
        strides : Sequence[int]
            Per-dimension strides in elements. Need not be row-major.
        offset : int, optional
            Flat position of the element at index (0, ..., 0).
        check : Optional[bool], optional
            Validate the layout against the storage. Defaults to the global
            `check_bounds` setting.

        Returns
        -------
        Tensor

        Raises
        ------
        DimensionMismatchError
            If `len(strides) != len(shape)`.
        InvalidShapeError
            If checking and `shape` has negative dimensions.
        InvalidViewError
            If checking and some reachable element lies outside the storage.

        Notes
        -----
        With checking disabled the caller must guarantee that every reachable
        element lies in `[0, storage.size)`. Element access still refuses flat
        positions outside the buffer.
        """
        if check is None:
            check = get_config().check_bounds

        dims = (
            normalize_shape(shape) if check else tuple(operator.index(d) for d in shape)
        )
        strs = tuple(operator.index(s) for s in strides)
        off = operator.index(offset)
        if len(strs) != len(dims):
            raise DimensionMismatchError(len(dims), len(strs), "strides")
        if check:
            cls._validate_view(storage, dims, strs, off)

        obj = cls.__new__(cls)
        obj._storage = copy.copy(storage)
        obj._shape = dims
        obj._strides = strs
        obj._offset = off
        obj._is_contiguous = check_contiguous(dims, strs)
        return obj

    @staticmethod
    def _validate_view(
        storage: Storage, shape: tuple, strides: tuple, offset: int
    ) -> None:
        if offset < 0:
            raise InvalidViewError(shape, strides, offset, "negative offset")
        span = reachable_range(shape, strides, offset)
        if span is None:
            return
        lo, hi = span
        if lo < 0 or hi >= storage.size:
            raise InvalidViewError(
                shape,
                strides,
                offset,
                f"reaches flat positions [{lo}, {hi}] but storage has "
                f"{storage.size} elements",
            )

    # ------------------------------------------------------------------
    # Copy / move / assignment
    # ------------------------------------------------------------------
    def __copy__(self) -> "Tensor":
        """Shallow copy: same layout, shared storage."""
        storage = self._require_storage("copy")
        obj = self.__class__.__new__(self.__class__)
        obj._storage = copy.copy(storage)
        obj._shape = self._shape
        obj._strides = self._strides
        obj._offset = self._offset
        obj._is_contiguous = self._is_contiguous
        return obj

    def __deepcopy__(self, memo: dict) -> "Tensor":
        out = self.clone()
        memo[id(self)] = out
        return out

    def assign(self, other: "Tensor") -> "Tensor":
        """
        Copy-assign: adopt `other`'s layout and share its storage.

        Self-assignment is a no-op. A moved-from tensor may be the target.

        Returns
        -------
        Tensor
            `self`, for chaining.
        """
        if other is self:
            return self
        storage = other._require_storage("assign")
        self._storage = copy.copy(storage)
        self._shape = other._shape
        self._strides = other._strides
        self._offset = other._offset
        self._is_contiguous = other._is_contiguous
        return self

    @classmethod
    def move(cls, other: "Tensor") -> "Tensor":
        """
        Move-construct a tensor from `other`.

        The storage handle is transferred without touching the reference
        count. `other` is left moved-from.
        """
        obj = cls.__new__(cls)
        obj._storage = None
        obj._take(other)
        return obj

    def move_assign(self, other: "Tensor") -> "Tensor":
        """
        Move-assign from `other`, releasing this tensor's previous handle.

        Self move-assignment is a no-op.
        """
        if other is self:
            return self
        self._take(other)
        return self

    def _take(self, other: "Tensor") -> None:
        storage = other._require_storage("move")
        self._storage = storage
        self._shape = other._shape
        self._strides = other._strides
        self._offset = other._offset
        self._is_contiguous = other._is_contiguous

        other._storage = None
        other._shape = ()
        other._strides = ()
        other._offset = 0
        other._is_contiguous = True

    @property
    def is_moved_from(self) -> bool:
        return self._storage is None

    def _require_storage(self, op: str) -> Storage:
        if self._storage is None:
            raise MovedFromTensorError(op)
        return self._storage

    # ------------------------------------------------------------------
    # Layout / placement
    # ------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        self._require_storage("shape")
        return self._shape

    @property
    def strides(self) -> tuple[int, ...]:
        self._require_storage("strides")
        return self._strides

    @property
    def offset(self) -> int:
        self._require_storage("offset")
        return self._offset

    @property
    def is_contiguous(self) -> bool:
        """Cached at construction; see `check_contiguous` for the rule."""
        self._require_storage("is_contiguous")
        return self._is_contiguous

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def numel(self) -> int:
        return compute_size(self.shape)

    @property
    def storage(self) -> Storage:
        """
        Return this tensor's storage handle.

        Raises
        ------
        MovedFromTensorError
            If the tensor has been moved from.
        """
        return self._require_storage("storage")

    @property
    def device(self) -> Device:
        return self._require_storage("device").device

    @property
    def dtype(self) -> np.dtype:
        return self._require_storage("dtype").dtype

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def offset_of(self, *indices: int) -> int:
        """
        Resolve a multi-index to its flat position in the storage buffer.

        Raises
        ------
        DimensionMismatchError
            If the number of indices differs from the rank.
        IndexOutOfBoundsError
            If bounds checking is enabled and some index is outside its
            dimension.
        MovedFromTensorError
            If the tensor has been moved from.
        """
        self._require_storage("offset_of")
        shape = self._shape if get_config().check_bounds else None
        return flat_offset(self._offset, self._strides, indices, shape)

    @staticmethod
    def _key_to_indices(key: Any) -> tuple:
        indices = key if isinstance(key, tuple) else (key,)
        for i in indices:
            if isinstance(i, (slice, type(Ellipsis))) or i is None:
                raise TypeError(
                    "Tensor indexing takes integers only; "
                    "use narrow()/select() to build sub-tensors"
                )
        return indices

    def __getitem__(self, key: Any) -> Any:
        storage = self._require_storage("__getitem__")
        return storage[self.offset_of(*self._key_to_indices(key))]

    def __setitem__(self, key: Any, value: Any) -> None:
        storage = self._require_storage("__setitem__")
        storage[self.offset_of(*self._key_to_indices(key))] = value

    def __repr__(self) -> str:
        if self._storage is None:
            return "Tensor(<moved-from>)"
        return (
            f"Tensor(shape={self._shape}, strides={self._strides}, "
            f"offset={self._offset}, device={self.device}, dtype={self.dtype}, "
            f"contiguous={self._is_contiguous})"
        )
