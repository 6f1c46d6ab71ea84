import copy
import unittest

import numpy as np

from flashtensor.domain._errors import IndexOutOfBoundsError, InvalidShapeError
from flashtensor.domain.device._device import Device
from flashtensor.infrastructure._config import bounds_checking
from flashtensor.infrastructure.storage._allocators import MockCudaAllocator
from flashtensor.infrastructure.storage._storage import Storage
from flashtensor.infrastructure.tensor._tensor import Tensor


class TestClone(unittest.TestCase):
    def test_clone_is_independent(self):
        a = Tensor.from_numpy(np.arange(4, dtype=np.float32))
        c = a.clone()
        a[0] = 100.0
        self.assertEqual(c[0], 0.0)
        self.assertFalse(c.storage.shares_buffer_with(a.storage))

    def test_clone_of_transposed_view_is_contiguous(self):
        x_np = np.arange(6, dtype=np.float32).reshape(2, 3)
        a = Tensor.from_numpy(x_np).transpose(0, 1)
        self.assertFalse(a.is_contiguous)

        c = a.clone()
        self.assertTrue(c.is_contiguous)
        self.assertEqual(c.offset, 0)
        self.assertEqual(c.shape, (3, 2))
        self.assertEqual(c.strides, (2, 1))
        for i in range(3):
            for j in range(2):
                self.assertEqual(c[i, j], a[i, j])
        np.testing.assert_array_equal(c.storage.data, x_np.T.reshape(-1))

    def test_clone_of_offset_view_resets_offset(self):
        s = Storage(10)
        s.data[:] = np.arange(10)
        v = Tensor.from_storage(s, (2, 2), (4, 1), 3)
        c = v.clone()
        self.assertEqual(c.offset, 0)
        self.assertEqual(c.storage.size, 4)
        np.testing.assert_array_equal(c.to_numpy(), [[3, 4], [7, 8]])

    def test_clone_keeps_device_dtype_and_allocator(self):
        alloc = MockCudaAllocator()
        a = Tensor((2, 2), "cuda:0", dtype=np.float64, allocator=alloc)
        c = a.clone()
        self.assertEqual(c.device, Device("cuda:0"))
        self.assertEqual(c.dtype, np.dtype(np.float64))
        self.assertIs(c.storage.allocator, alloc)
        self.assertEqual(alloc.allocation_count, 2)

    def test_clone_scalar_and_empty(self):
        s = Tensor(())
        s[()] = 3.0
        self.assertEqual(s.clone()[()], 3.0)
        e = Tensor((0, 4))
        self.assertEqual(e.clone().shape, (0, 4))

    def test_deepcopy_is_clone(self):
        a = Tensor.from_numpy(np.ones((2, 2), dtype=np.float32))
        d = copy.deepcopy(a)
        self.assertFalse(d.storage.shares_buffer_with(a.storage))
        np.testing.assert_array_equal(d.to_numpy(), a.to_numpy())


class TestContiguousAndTo(unittest.TestCase):
    def test_contiguous_returns_self_when_possible(self):
        a = Tensor((2, 3))
        self.assertIs(a.contiguous(), a)

    def test_contiguous_materializes_views(self):
        a = Tensor.from_numpy(np.arange(6, dtype=np.float32).reshape(2, 3))
        t = a.transpose(0, 1)
        c = t.contiguous()
        self.assertIsNot(c, t)
        self.assertTrue(c.is_contiguous)
        np.testing.assert_array_equal(c.to_numpy(), t.to_numpy())

    def test_to_other_device_copies(self):
        a = Tensor.from_numpy(np.arange(3, dtype=np.float32))
        g = a.to("cuda")
        self.assertTrue(g.device.is_cuda())
        np.testing.assert_array_equal(g.to_numpy(), [0, 1, 2])
        self.assertIs(g.to("cuda:0"), g)
        back = g.to("cpu")
        self.assertTrue(back.device.is_cpu())


class TestHostIO(unittest.TestCase):
    def test_to_numpy_respects_strides(self):
        x_np = np.arange(12, dtype=np.float32).reshape(3, 4)
        a = Tensor.from_numpy(x_np)
        np.testing.assert_array_equal(a.to_numpy(), x_np)
        np.testing.assert_array_equal(a.transpose(0, 1).to_numpy(), x_np.T)

    def test_to_numpy_is_a_copy(self):
        a = Tensor.from_numpy(np.zeros(3, dtype=np.float32))
        arr = a.to_numpy()
        arr[0] = 5.0
        self.assertEqual(a[0], 0.0)

    def test_copy_from_numpy_through_view(self):
        a = Tensor((2, 3))
        a.transpose(0, 1).copy_from_numpy(np.arange(6).reshape(3, 2))
        np.testing.assert_array_equal(a.to_numpy(), np.arange(6).reshape(3, 2).T)

    def test_copy_from_numpy_shape_mismatch(self):
        with self.assertRaises(InvalidShapeError):
            Tensor((2, 3)).copy_from_numpy(np.zeros((3, 2)))

    def test_fill_only_touches_view(self):
        a = Tensor((3, 3))
        a.narrow(0, 1, 1).fill_(7.0)
        expected = np.zeros((3, 3), dtype=np.float32)
        expected[1] = 7.0
        np.testing.assert_array_equal(a.to_numpy(), expected)

    def test_unchecked_bad_view_is_caught_on_bulk_access(self):
        with bounds_checking(False):
            v = Tensor.from_storage(Storage(4), (2, 3), (3, 1))
        with self.assertRaises(IndexOutOfBoundsError):
            v.to_numpy()


class TestFactories(unittest.TestCase):
    def test_zeros_and_full(self):
        np.testing.assert_array_equal(Tensor.zeros((2, 2)).to_numpy(), np.zeros((2, 2)))
        f = Tensor.full((2, 3), 1.5, "cuda")
        self.assertTrue(f.device.is_cuda())
        np.testing.assert_array_equal(f.to_numpy(), np.full((2, 3), 1.5))

    def test_zeros_with_uninitialised_backend(self):
        class _Dirty:
            def allocate(self, size, dtype):
                return np.full(size, 13, dtype=dtype)

            def release(self, handle):
                pass

        z = Tensor.zeros((3,), allocator=_Dirty())
        np.testing.assert_array_equal(z.to_numpy(), np.zeros(3))

    def test_from_numpy_keeps_dtype(self):
        t = Tensor.from_numpy(np.arange(6, dtype=np.int64).reshape(2, 3))
        self.assertEqual(t.dtype, np.dtype(np.int64))
        self.assertEqual(t[1, 2], 5)
        self.assertTrue(t.is_contiguous)


if __name__ == "__main__":
    unittest.main()
