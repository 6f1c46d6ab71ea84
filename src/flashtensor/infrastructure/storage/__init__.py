from ._allocators import (
    CpuAllocator,
    MockCudaAllocator,
    register_allocator,
    unregister_allocator,
    get_allocator,
)
from ._storage import Storage

__all__ = [
    Storage.__name__,
    CpuAllocator.__name__,
    MockCudaAllocator.__name__,
    register_allocator.__name__,
    unregister_allocator.__name__,
    get_allocator.__name__,
]
