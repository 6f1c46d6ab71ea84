"""
Storage interface definitions.

`IStorage` captures the backend-agnostic surface of a device-tagged, shared,
fixed-size buffer. Tensor code types against this protocol so that storage
implementations can be swapped without touching the view layer.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import numpy as np

from .device._device_protocol import DeviceLike


@runtime_checkable
class IStorage(Protocol):
    """
    Storage interface.

    Notes
    -----
    - `data` aliases the underlying allocation; writes through it are
      visible to every tensor sharing the storage.
    - `use_count` reports how many storage handles share the same buffer.
    """

    @property
    def device(self) -> DeviceLike: ...

    @property
    def size(self) -> int: ...

    @property
    def dtype(self) -> np.dtype: ...

    @property
    def data(self) -> np.ndarray: ...

    @property
    def use_count(self) -> int: ...

    def __getitem__(self, pos: int) -> Any: ...

    def __setitem__(self, pos: int, value: Any) -> None: ...
