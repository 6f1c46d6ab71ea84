"""
Reference-counted buffer block shared by storage handles.

`_SharedBuffer` wraps a single allocation produced by a device allocator. Every
`Storage` handle that refers to the allocation holds one reference; the
allocation is handed back to its allocator exactly once, when the last
reference is dropped.

Lifetime
--------
- Each `Storage` handle calls `incref()` when it attaches and installs a
  `weakref.finalize` on itself that calls `decref()`. Copying a `Storage`
  therefore costs one increment and never touches the data.
- When the count reaches zero, `release` runs on the allocator and the block
  forgets its handle. Subsequent `decref()` calls are no-ops.

Notes
-----
- The block intentionally avoids `__del__`; finalization is driven by the
  handles' `weakref.finalize` callbacks.
- Release errors are logged, never raised: finalizers may run during garbage
  collection or interpreter shutdown where an exception has nowhere to go.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
from typing import Optional

import numpy as np

from ...domain.device._allocator_protocol import IDeviceAllocator

logger = logging.getLogger(__name__)


@dataclass
class _SharedBuffer:
    """
    Single allocation plus the bookkeeping needed to release it once.

    Attributes
    ----------
    allocator : IDeviceAllocator
        Backend that produced `handle` and will receive it back.
    handle : Optional[np.ndarray]
        The one-dimensional buffer; None once released.
    """

    allocator: IDeviceAllocator
    handle: Optional[np.ndarray]

    _refcnt: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def refcount(self) -> int:
        return self._refcnt

    @property
    def released(self) -> bool:
        return self.handle is None

    def incref(self) -> None:
        with self._lock:
            self._refcnt += 1

    def decref(self) -> None:
        """
        Drop one reference and release the allocation if it was the last.

        Thread-safe. The allocator call happens outside the lock.
        """
        with self._lock:
            self._refcnt -= 1
            if self._refcnt > 0 or self.handle is None:
                return
            handle, self.handle = self.handle, None

        try:
            self.allocator.release(handle)
        except Exception:
            logger.warning(
                "allocator %r failed to release a buffer", self.allocator,
                exc_info=True,
            )
