"""
Device backend contract.

`IDeviceAllocator` is the only boundary between the storage layer and a
device backend. A backend owns the raw memory; `Storage` only holds the
handle returned by `allocate` and hands it back to `release` once the last
reference is dropped.

Contract
--------
- `allocate(size, dtype)` returns a one-dimensional NumPy array of exactly
  `size` elements of `dtype`, or raises `AllocationFailureError`.
- `release(handle)` is invoked exactly once per successful allocation and
  must not raise.

Adding a device means implementing this protocol and registering it; neither
`Storage` nor `Tensor` changes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class IDeviceAllocator(Protocol):
    """Structural contract for device memory backends."""

    def allocate(self, size: int, dtype: np.dtype) -> np.ndarray:
        """
        Allocate a buffer of `size` elements of `dtype`.

        Raises
        ------
        AllocationFailureError
            If the request cannot be satisfied.
        """
        ...

    def release(self, handle: np.ndarray) -> None:
        """Return a buffer previously produced by `allocate`."""
        ...
