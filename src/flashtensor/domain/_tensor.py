"""
Tensor interface definitions.

This module defines the domain-level interface for strided tensor views using
structural typing. The interface covers layout metadata, element access and
copy semantics; it deliberately carries no arithmetic.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import numpy as np

from ._storage import IStorage
from .device._device_protocol import DeviceLike


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is a (shape, strides, offset) view over a shared `IStorage`.
    Several tensors may view the same storage; writes through one are visible
    through all of them.
    """

    # ---------------------------------------------------------------------
    # Layout
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]: ...

    @property
    def strides(self) -> tuple[int, ...]: ...

    @property
    def offset(self) -> int: ...

    @property
    def is_contiguous(self) -> bool: ...

    @property
    def ndim(self) -> int: ...

    @property
    def numel(self) -> int: ...

    # ---------------------------------------------------------------------
    # Placement / backing memory
    # ---------------------------------------------------------------------
    @property
    def storage(self) -> IStorage: ...

    @property
    def device(self) -> DeviceLike: ...

    @property
    def dtype(self) -> np.dtype: ...

    # ---------------------------------------------------------------------
    # Element access
    # ---------------------------------------------------------------------
    def offset_of(self, *indices: int) -> int:
        """
        Resolve a multi-index to a flat position in the storage buffer.

        Returns
        -------
        int
            `offset + sum(index[d] * strides[d])`.
        """
        ...

    def __getitem__(self, key: Any) -> Any: ...

    def __setitem__(self, key: Any, value: Any) -> None: ...

    # ---------------------------------------------------------------------
    # Copies
    # ---------------------------------------------------------------------
    def clone(self) -> "ITensor":
        """Return a contiguous deep copy backed by an independent storage."""
        ...
