from ._config import RuntimeConfig, get_config, set_check_bounds, bounds_checking
from .storage import (
    Storage,
    CpuAllocator,
    MockCudaAllocator,
    register_allocator,
    unregister_allocator,
    get_allocator,
)
from .tensor import Tensor

__all__ = [
    RuntimeConfig.__name__,
    get_config.__name__,
    set_check_bounds.__name__,
    bounds_checking.__name__,
    Storage.__name__,
    CpuAllocator.__name__,
    MockCudaAllocator.__name__,
    register_allocator.__name__,
    unregister_allocator.__name__,
    get_allocator.__name__,
    Tensor.__name__,
]
