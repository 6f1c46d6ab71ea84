"""
Device allocators and the allocator registry.

This module ships the two default backends that satisfy `IDeviceAllocator`:

- `CpuAllocator`: plain host arrays, released by dropping the reference.
- `MockCudaAllocator`: a stand-in for a CUDA device allocator. Memory lives on
  the host, but allocation and release go through a distinct path that
  tracks bytes in use, honours an optional capacity, and logs its teardown.

Backends are looked up by `DeviceType` through a small registry. `Storage`
resolves its allocator once at construction, so swapping in a real device
backend is a single `register_allocator` call.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import numpy as np

from ...domain._errors import AllocationFailureError, InvalidDeviceError
from ...domain.device._allocator_protocol import IDeviceAllocator
from ...domain.device._device import DeviceType

logger = logging.getLogger(__name__)


class _CountingAllocator(ABC):
    """
    Shared bookkeeping for the default allocators.

    Subclasses implement `_allocate` / `_release`; this base validates the
    request, wraps backend failures in `AllocationFailureError`, and counts
    successful allocations and releases.
    """

    device_name: str = "?"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.allocation_count = 0
        self.release_count = 0

    @property
    def live_allocations(self) -> int:
        """Number of buffers handed out and not yet released."""
        return self.allocation_count - self.release_count

    def allocate(self, size: int, dtype: np.dtype) -> np.ndarray:
        if not isinstance(size, (int, np.integer)) or isinstance(size, bool):
            raise AllocationFailureError(
                size, self.device_name, f"size must be an int, got {type(size).__name__}"
            )
        if size < 0:
            raise AllocationFailureError(size, self.device_name, "negative size")

        try:
            handle = self._allocate(int(size), np.dtype(dtype))
        except (MemoryError, ValueError) as exc:
            raise AllocationFailureError(size, self.device_name, str(exc)) from exc

        with self._lock:
            self.allocation_count += 1
        logger.debug(
            "allocated %d x %s on %s", size, handle.dtype, self.device_name
        )
        return handle

    def release(self, handle: np.ndarray) -> None:
        self._release(handle)
        with self._lock:
            self.release_count += 1

    @abstractmethod
    def _allocate(self, size: int, dtype: np.dtype) -> np.ndarray:
        """Return a fresh 1-D buffer of `size` elements."""

    @abstractmethod
    def _release(self, handle: np.ndarray) -> None:
        """Give `handle` back to the device."""


class CpuAllocator(_CountingAllocator):
    """Host-memory backend: zero-initialised NumPy arrays."""

    device_name = "cpu"

    def _allocate(self, size: int, dtype: np.dtype) -> np.ndarray:
        return np.zeros(size, dtype=dtype)

    def _release(self, handle: np.ndarray) -> None:
        logger.debug("released %d x %s on cpu", handle.size, handle.dtype)


class MockCudaAllocator(_CountingAllocator):
    """
    Simulated CUDA backend.

    Parameters
    ----------
    capacity_bytes : Optional[int]
        Upper bound on bytes in use at once. Requests that would exceed it
        fail with `AllocationFailureError`, mimicking device OOM. None means
        unbounded.

    Notes
    -----
    Buffers are host arrays; no kernel ever runs on them. The point of this
    backend is to exercise the device-specific allocation/release path.
    """

    device_name = "cuda"

    def __init__(self, capacity_bytes: Optional[int] = None) -> None:
        super().__init__()
        self.capacity_bytes = capacity_bytes
        self.bytes_in_use = 0

    def _allocate(self, size: int, dtype: np.dtype) -> np.ndarray:
        nbytes = size * dtype.itemsize
        with self._lock:
            if (
                self.capacity_bytes is not None
                and self.bytes_in_use + nbytes > self.capacity_bytes
            ):
                raise MemoryError(
                    f"out of mock device memory ({self.bytes_in_use} + {nbytes} "
                    f"> {self.capacity_bytes} bytes)"
                )
            self.bytes_in_use += nbytes
        try:
            return np.zeros(size, dtype=dtype)
        except MemoryError:
            with self._lock:
                self.bytes_in_use -= nbytes
            raise

    def _release(self, handle: np.ndarray) -> None:
        with self._lock:
            self.bytes_in_use -= handle.nbytes
        logger.info("Cleaning up mock GPU memory (%d bytes)", handle.nbytes)


_registry_lock = threading.Lock()
_ALLOCATORS: Dict[DeviceType, IDeviceAllocator] = {
    DeviceType.CPU: CpuAllocator(),
    DeviceType.CUDA: MockCudaAllocator(),
}


def register_allocator(
    device_type: DeviceType, allocator: IDeviceAllocator
) -> Optional[IDeviceAllocator]:
    """
    Install `allocator` as the backend for `device_type`.

    Returns
    -------
    Optional[IDeviceAllocator]
        The previously registered allocator, so callers can restore it.

    Raises
    ------
    InvalidDeviceError
        If `device_type` is not a `DeviceType`.
    TypeError
        If `allocator` does not satisfy `IDeviceAllocator`.
    """
    if not isinstance(device_type, DeviceType):
        raise InvalidDeviceError(device_type, "expected a DeviceType")
    if not isinstance(allocator, IDeviceAllocator):
        raise TypeError(
            f"allocator must implement allocate/release, got {type(allocator)!r}"
        )
    with _registry_lock:
        previous = _ALLOCATORS.get(device_type)
        _ALLOCATORS[device_type] = allocator
    return previous


def unregister_allocator(device_type: DeviceType) -> Optional[IDeviceAllocator]:
    """Remove and return the backend for `device_type` (None if absent)."""
    with _registry_lock:
        return _ALLOCATORS.pop(device_type, None)


def get_allocator(device_type: DeviceType) -> IDeviceAllocator:
    """
    Return the backend registered for `device_type`.

    Raises
    ------
    InvalidDeviceError
        If no backend is registered for it.
    """
    with _registry_lock:
        allocator = _ALLOCATORS.get(device_type)
    if allocator is None:
        raise InvalidDeviceError(device_type, "no allocator registered")
    return allocator
