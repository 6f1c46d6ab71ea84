"""
Layout arithmetic for strided tensors.

Pure functions over (shape, strides, offset) tuples. All quantities are in
elements, not bytes.

- `compute_size`      : element count of a shape (1 for the empty shape)
- `compute_strides`   : row-major (C-order) strides of a shape
- `check_contiguous`  : row-major test that ignores size-1 dimensions
- `flat_offset`       : resolve a multi-index to a flat buffer position
- `reachable_range`   : lowest/highest flat position a layout can touch
"""

from __future__ import annotations

import operator
from itertools import accumulate
from typing import Optional, Sequence, Tuple

from ...domain._errors import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidShapeError,
)


def normalize_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    """
    Convert a shape-like sequence into a tuple of Python ints.

    Raises
    ------
    TypeError
        If any entry is not an integer.
    InvalidShapeError
        If any entry is negative.
    """
    dims = tuple(operator.index(d) for d in shape)
    if any(d < 0 for d in dims):
        raise InvalidShapeError(dims, "dimensions must be non-negative")
    return dims


def compute_size(shape: Sequence[int]) -> int:
    """Product of all dimensions; the empty shape has one element."""
    size = 1
    for d in shape:
        size *= d
    return size


def compute_strides(shape: Sequence[int]) -> Tuple[int, ...]:
    """
    Row-major strides for `shape`.

    Right-to-left exclusive running product seeded at 1, so
    `strides[-1] == 1` and `strides[i] == strides[i + 1] * shape[i + 1]`.

    Examples
    --------
    >>> compute_strides((2, 3, 4))
    (12, 4, 1)
    """
    if len(shape) == 0:
        return ()
    running = accumulate(reversed(shape[1:]), operator.mul, initial=1)
    return tuple(reversed(tuple(running)))


def check_contiguous(shape: Sequence[int], strides: Sequence[int]) -> bool:
    """
    Return True if `strides` is the row-major layout of `shape`.

    Dimensions are walked from last to first with an expected stride that
    starts at 1. Size-1 dimensions are skipped, so their stride may be
    anything. Every other dimension must have exactly the expected stride,
    which is then multiplied by that dimension's size.
    """
    if len(shape) != len(strides):
        raise DimensionMismatchError(len(shape), len(strides), "strides")
    expected = 1
    for dim, stride in zip(reversed(shape), reversed(strides)):
        if dim == 1:
            continue
        if stride != expected:
            return False
        expected *= dim
    return True


def flat_offset(
    offset: int,
    strides: Sequence[int],
    indices: Sequence[int],
    shape: Optional[Sequence[int]] = None,
) -> int:
    """
    Resolve `indices` to `offset + sum(indices[d] * strides[d])`.

    Parameters
    ----------
    offset : int
        Base element offset of the view.
    strides : Sequence[int]
        Per-dimension strides.
    indices : Sequence[int]
        One index per dimension.
    shape : Optional[Sequence[int]]
        When given, each index is checked against `[0, shape[d])`.

    Raises
    ------
    DimensionMismatchError
        If `len(indices) != len(strides)`.
    IndexOutOfBoundsError
        If `shape` is given and an index is out of range.
    """
    if len(indices) != len(strides):
        raise DimensionMismatchError(len(strides), len(indices))
    pos = offset
    for d, (i, s) in enumerate(zip(indices, strides)):
        i = operator.index(i)
        if shape is not None and not 0 <= i < shape[d]:
            raise IndexOutOfBoundsError(i, shape[d], dim=d)
        pos += i * s
    return pos


def reachable_range(
    shape: Sequence[int], strides: Sequence[int], offset: int
) -> Optional[Tuple[int, int]]:
    """
    Return the (lowest, highest) flat positions a layout can address.

    Returns None when the layout has no elements (some dimension is 0).
    Negative strides are handled: each dimension contributes its extent to
    whichever end its stride points at.
    """
    if any(d == 0 for d in shape):
        return None
    lo = hi = offset
    for dim, stride in zip(shape, strides):
        extent = (dim - 1) * stride
        if extent < 0:
            lo += extent
        else:
            hi += extent
    return lo, hi
