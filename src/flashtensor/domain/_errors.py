"""
Storage- and tensor-related exceptions for flashtensor.

This module defines the custom errors raised by the memory/view layer. Each
error stores the context it was raised with as attributes, so callers can
inspect the failure without parsing the message.

All errors derive from `FlashTensorError` and additionally from the closest
builtin exception (e.g. `IndexError`, `ValueError`), so generic handlers keep
working.
"""

from __future__ import annotations

from typing import Optional, Sequence


class FlashTensorError(Exception):
    """Base class for every error raised by flashtensor."""


class InvalidDeviceError(FlashTensorError, ValueError):
    """
    Raised when a device value is not recognized or has no backend.

    Attributes
    ----------
    device : object
        The offending device value as supplied by the caller.
    """

    def __init__(self, device: object, reason: str = "unrecognized device") -> None:
        """
        Initialize the InvalidDeviceError.

        Parameters
        ----------
        device : object
            The device value that could not be resolved.
        reason : str, optional
            Short description of why the device was rejected.
        """
        super().__init__(f"Invalid device {device!r}: {reason}.")
        self.device = device
        self.reason = reason


class AllocationFailureError(FlashTensorError, MemoryError):
    """
    Raised when a device backend cannot satisfy an allocation request.

    Attributes
    ----------
    size : int
        Requested element count.
    device : str
        String form of the target device.
    """

    def __init__(self, size: int, device: str, reason: str = "") -> None:
        """
        Initialize the AllocationFailureError.

        Parameters
        ----------
        size : int
            Number of elements that were requested.
        device : str
            Device identifier (e.g. "cpu", "cuda:0").
        reason : str, optional
            Backend-provided detail.
        """
        msg = f"Failed to allocate {size} elements on '{device}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg + ".")
        self.size = size
        self.device = device
        self.reason = reason


class DimensionMismatchError(FlashTensorError, IndexError):
    """
    Raised when an index tuple (or a layout sequence) does not match the rank.

    Attributes
    ----------
    expected : int
        The rank that was required.
    got : int
        The length that was supplied.
    """

    def __init__(self, expected: int, got: int, what: str = "indices") -> None:
        super().__init__(
            f"Dimension mismatch: expected {expected} {what}, got {got}."
        )
        self.expected = expected
        self.got = got
        self.what = what


class IndexOutOfBoundsError(FlashTensorError, IndexError):
    """
    Raised when an index falls outside the addressable range.

    Attributes
    ----------
    index : int
        The offending index (or flat position).
    bound : int
        Exclusive upper bound the index was checked against.
    dim : Optional[int]
        Dimension the index belongs to, or None for flat storage positions.
    """

    def __init__(self, index: int, bound: int, dim: Optional[int] = None) -> None:
        if dim is None:
            msg = f"Flat position {index} out of bounds for storage of size {bound}."
        else:
            msg = f"Index {index} out of bounds for dimension {dim} with size {bound}."
        super().__init__(msg)
        self.index = index
        self.bound = bound
        self.dim = dim


class InvalidDimensionError(FlashTensorError, IndexError):
    """
    Raised when a dimension argument is out of range or repeated.

    Attributes
    ----------
    dim : int
        The offending dimension as supplied.
    ndim : int
        Rank of the tensor it was applied to.
    """

    def __init__(self, dim: int, ndim: int, reason: str = "out of range") -> None:
        super().__init__(
            f"Dimension {dim} {reason} for tensor of rank {ndim}."
        )
        self.dim = dim
        self.ndim = ndim
        self.reason = reason


class InvalidViewError(FlashTensorError, ValueError):
    """
    Raised when a (shape, strides, offset) layout cannot be served by a storage.

    Attributes
    ----------
    shape : tuple[int, ...]
    strides : tuple[int, ...]
    offset : int
    """

    def __init__(
        self,
        shape: Sequence[int],
        strides: Sequence[int],
        offset: int,
        reason: str,
    ) -> None:
        super().__init__(
            f"Invalid view shape={tuple(shape)} strides={tuple(strides)} "
            f"offset={offset}: {reason}."
        )
        self.shape = tuple(shape)
        self.strides = tuple(strides)
        self.offset = offset
        self.reason = reason


class InvalidShapeError(FlashTensorError, ValueError):
    """Raised when a shape contains negative dimensions or cannot be reshaped."""

    def __init__(self, shape: Sequence[int], reason: str) -> None:
        super().__init__(f"Invalid shape {tuple(shape)}: {reason}.")
        self.shape = tuple(shape)
        self.reason = reason


class MovedFromTensorError(FlashTensorError, RuntimeError):
    """
    Raised when a tensor is used after its contents were moved out.

    A moved-from tensor may only be reassigned (via `assign` or
    `move_assign`) or dropped.
    """

    def __init__(self, op: str) -> None:
        super().__init__(f"Cannot call '{op}' on a moved-from tensor.")
        self.op = op
