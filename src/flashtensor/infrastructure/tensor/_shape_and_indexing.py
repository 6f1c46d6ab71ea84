"""
Tensor view-producing ops mixin.

This module defines `TensorShapeAndIndexingMixin`, which implements the
operations that reinterpret a tensor's layout without touching its data:
`transpose`, `permute`, `view`, `narrow`, `select`, `unsqueeze` and
`as_strided`.

Design notes
------------
- Every result is built through `from_storage` on the host class, so it
  shares storage with its source and has its contiguity re-derived.
- To avoid circular imports, the mixin never imports `Tensor`; it relies on
  `self.__class__`.
- Methods assume the host class provides `shape`, `strides`, `offset`,
  `storage`, `is_contiguous` and `from_storage(...)`.
"""

from __future__ import annotations

import operator
from typing import Optional, Sequence

from ...domain._errors import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidDimensionError,
    InvalidShapeError,
    InvalidViewError,
)
from ._layout import compute_size, compute_strides


def _normalize_dim(dim: int, ndim: int) -> int:
    d = operator.index(dim)
    if not -ndim <= d < ndim:
        raise InvalidDimensionError(dim, ndim)
    return d + ndim if d < 0 else d


class TensorShapeAndIndexingMixin:
    """
    View operations for the concrete Tensor implementation.

    All methods return new tensors that alias the source storage; writes
    through either are visible through both.
    """

    def _make_view(
        self, shape: Sequence[int], strides: Sequence[int], offset: int
    ) -> "TensorShapeAndIndexingMixin":
        return self.__class__.from_storage(self.storage, shape, strides, offset)

    def as_strided(
        self,
        shape: Sequence[int],
        strides: Sequence[int],
        offset: Optional[int] = None,
    ) -> "TensorShapeAndIndexingMixin":
        """
        View the same storage with an arbitrary layout.

        `offset` defaults to this tensor's offset. The layout goes through
        the same validation as `from_storage`.
        """
        return self._make_view(shape, strides, self.offset if offset is None else offset)

    def transpose(self, dim0: int, dim1: int) -> "TensorShapeAndIndexingMixin":
        """Swap two dimensions (negative dims count from the end)."""
        ndim = len(self.shape)
        d0 = _normalize_dim(dim0, ndim)
        d1 = _normalize_dim(dim1, ndim)
        order = list(range(ndim))
        order[d0], order[d1] = order[d1], order[d0]
        return self.permute(*order)

    def permute(self, *dims: int) -> "TensorShapeAndIndexingMixin":
        """
        Reorder dimensions.

        Accepts either `permute(2, 0, 1)` or `permute((2, 0, 1))`.

        Raises
        ------
        DimensionMismatchError
            If the number of dims differs from the rank.
        InvalidDimensionError
            If a dim is out of range or repeated.
        """
        if len(dims) == 1 and isinstance(dims[0], (tuple, list)):
            dims = tuple(dims[0])
        ndim = len(self.shape)
        if len(dims) != ndim:
            raise DimensionMismatchError(ndim, len(dims), "dims")

        order = [_normalize_dim(d, ndim) for d in dims]
        seen = set()
        for raw, d in zip(dims, order):
            if d in seen:
                raise InvalidDimensionError(raw, ndim, "repeated")
            seen.add(d)

        shape = tuple(self.shape[d] for d in order)
        strides = tuple(self.strides[d] for d in order)
        return self._make_view(shape, strides, self.offset)

    def view(self, *shape: int) -> "TensorShapeAndIndexingMixin":
        """
        Reinterpret a contiguous tensor with a new shape.

        One dimension may be -1 and is inferred from the element count.

        Raises
        ------
        InvalidViewError
            If the tensor is not contiguous.
        InvalidShapeError
            If the new shape does not hold exactly `numel` elements.
        """
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        if not self.is_contiguous:
            raise InvalidViewError(
                self.shape, self.strides, self.offset,
                "view requires a contiguous tensor; call contiguous() first",
            )

        dims = [operator.index(s) for s in shape]
        numel = compute_size(self.shape)

        infer = [i for i, s in enumerate(dims) if s == -1]
        if len(infer) > 1:
            raise InvalidShapeError(dims, "only one dimension can be -1")
        if any(s < -1 for s in dims):
            raise InvalidShapeError(dims, "dimensions must be non-negative")
        if infer:
            known = compute_size(s for i, s in enumerate(dims) if i != infer[0])
            if known == 0 or numel % known != 0:
                raise InvalidShapeError(
                    dims, f"cannot infer -1 for {numel} elements"
                )
            dims[infer[0]] = numel // known

        if compute_size(dims) != numel:
            raise InvalidShapeError(
                dims, f"shape holds {compute_size(dims)} elements, tensor has {numel}"
            )
        return self._make_view(dims, compute_strides(dims), self.offset)

    def narrow(self, dim: int, start: int, length: int) -> "TensorShapeAndIndexingMixin":
        """
        Restrict `dim` to `[start, start + length)`.

        Raises
        ------
        IndexOutOfBoundsError
            If the range does not fit inside the dimension.
        InvalidShapeError
            If `length` is negative.
        """
        d = _normalize_dim(dim, len(self.shape))
        size = self.shape[d]
        start = operator.index(start)
        length = operator.index(length)
        if start < 0:
            start += size
        if length < 0:
            raise InvalidShapeError((length,), "narrow length must be non-negative")
        if not 0 <= start <= size:
            raise IndexOutOfBoundsError(start, size, dim=d)
        if start + length > size:
            raise IndexOutOfBoundsError(start + length - 1, size, dim=d)

        shape = list(self.shape)
        shape[d] = length
        offset = self.offset + start * self.strides[d]
        return self._make_view(shape, self.strides, offset)

    def select(self, dim: int, index: int) -> "TensorShapeAndIndexingMixin":
        """Fix `dim` at `index`, returning a tensor of rank `ndim - 1`."""
        d = _normalize_dim(dim, len(self.shape))
        size = self.shape[d]
        i = operator.index(index)
        if i < 0:
            i += size
        if not 0 <= i < size:
            raise IndexOutOfBoundsError(index, size, dim=d)

        shape = self.shape[:d] + self.shape[d + 1:]
        strides = self.strides[:d] + self.strides[d + 1:]
        return self._make_view(shape, strides, self.offset + i * self.strides[d])

    def unsqueeze(self, dim: int) -> "TensorShapeAndIndexingMixin":
        """Insert a size-1 dimension at `dim` (range `[-ndim-1, ndim]`)."""
        ndim = len(self.shape)
        d = _normalize_dim(dim, ndim + 1)
        # row-major stride for the new dim
        stride = self.strides[d] * self.shape[d] if d < ndim else 1
        shape = self.shape[:d] + (1,) + self.shape[d:]
        strides = self.strides[:d] + (stride,) + self.strides[d:]
        return self._make_view(shape, strides, self.offset)
