from ._layout import (
    check_contiguous,
    compute_size,
    compute_strides,
    flat_offset,
    reachable_range,
)
from ._tensor import Tensor

__all__ = [
    Tensor.__name__,
    check_contiguous.__name__,
    compute_size.__name__,
    compute_strides.__name__,
    flat_offset.__name__,
    reachable_range.__name__,
]
