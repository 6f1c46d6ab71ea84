import unittest

import numpy as np

from flashtensor.domain._errors import DimensionMismatchError, IndexOutOfBoundsError
from flashtensor.infrastructure._config import bounds_checking
from flashtensor.infrastructure.storage._storage import Storage
from flashtensor.infrastructure.tensor._tensor import Tensor


class TestElementAccess(unittest.TestCase):
    def test_read_write_rank3(self):
        t = Tensor((2, 3, 4))
        t[1, 2, 3] = 5.0
        self.assertEqual(t[1, 2, 3], 5.0)
        self.assertEqual(t.storage.data[23], 5.0)

    def test_rank1_accepts_bare_int(self):
        t = Tensor((3,))
        t[2] = 1.5
        self.assertEqual(t[(2,)], 1.5)

    def test_numpy_integer_indices(self):
        t = Tensor((2, 2))
        t[np.int64(1), np.int32(0)] = 6.0
        self.assertEqual(t[1, 0], 6.0)

    def test_access_goes_through_offset(self):
        s = Storage(40)
        v = Tensor.from_storage(s, (3, 10), (10, 1), 5)
        v[1, 2] = 11.0
        self.assertEqual(s[17], 11.0)

    def test_arity_mismatch(self):
        t = Tensor((2, 3, 4))
        with self.assertRaises(DimensionMismatchError):
            t[1, 2]
        with self.assertRaises(DimensionMismatchError):
            t[0, 0, 0, 0] = 1.0
        with self.assertRaises(DimensionMismatchError):
            t.offset_of(1)

    def test_slices_are_rejected(self):
        t = Tensor((2, 3))
        with self.assertRaises(TypeError):
            t[0, :]
        with self.assertRaises(TypeError):
            t[...]

    def test_out_of_range_index_checked(self):
        t = Tensor((2, 3))
        with self.assertRaises(IndexOutOfBoundsError) as ctx:
            t[0, 3]
        self.assertEqual(ctx.exception.dim, 1)
        with self.assertRaises(IndexOutOfBoundsError):
            t[-1, 0]

    def test_unchecked_index_resolves_raw_offset(self):
        t = Tensor((2, 3))
        t.storage.data[4] = 2.0
        with bounds_checking(False):
            # (0, 4) walks past the end of row 0 into row 1
            self.assertEqual(t.offset_of(0, 4), 4)
            self.assertEqual(t[0, 4], 2.0)

    def test_unchecked_index_still_guarded_by_storage(self):
        t = Tensor((2, 3))
        with bounds_checking(False):
            with self.assertRaises(IndexOutOfBoundsError):
                t[5, 0]
            with self.assertRaises(IndexOutOfBoundsError):
                t[-1, 0]


if __name__ == "__main__":
    unittest.main()
