import unittest

import numpy as np

from flashtensor.domain._errors import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidDimensionError,
    InvalidShapeError,
    InvalidViewError,
)
from flashtensor.infrastructure.tensor._tensor import Tensor


def _arange(*shape):
    n = int(np.prod(shape)) if shape else 1
    return Tensor.from_numpy(np.arange(n, dtype=np.float32).reshape(shape))


class TestTransposePermute(unittest.TestCase):
    def test_transpose_swaps_shape_and_strides(self):
        t = _arange(2, 3).transpose(0, 1)
        self.assertEqual(t.shape, (3, 2))
        self.assertEqual(t.strides, (1, 3))
        self.assertFalse(t.is_contiguous)

    def test_transpose_aliases_source(self):
        a = _arange(2, 3)
        t = a.transpose(-1, 0)
        t[2, 1] = -1.0
        self.assertEqual(a[1, 2], -1.0)

    def test_permute(self):
        x_np = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        p = _arange(2, 3, 4).permute(2, 0, 1)
        self.assertEqual(p.shape, (4, 2, 3))
        np.testing.assert_array_equal(p.to_numpy(), x_np.transpose(2, 0, 1))
        self.assertEqual(_arange(2, 3).permute((1, 0)).shape, (3, 2))

    def test_permute_errors(self):
        a = _arange(2, 3)
        with self.assertRaises(DimensionMismatchError):
            a.permute(0)
        with self.assertRaises(InvalidDimensionError):
            a.permute(0, 0)
        with self.assertRaises(InvalidDimensionError):
            a.transpose(0, 2)


class TestView(unittest.TestCase):
    def test_view_reshapes_and_aliases(self):
        a = _arange(2, 6)
        v = a.view(3, 4)
        self.assertEqual(v.shape, (3, 4))
        self.assertEqual(v.strides, (4, 1))
        v[2, 3] = 50.0
        self.assertEqual(a[1, 5], 50.0)

    def test_view_infers_minus_one(self):
        self.assertEqual(_arange(2, 6).view(-1, 3).shape, (4, 3))
        self.assertEqual(_arange(2, 6).view((12,)).shape, (12,))

    def test_view_requires_contiguous(self):
        with self.assertRaises(InvalidViewError):
            _arange(2, 3).transpose(0, 1).view(6)

    def test_view_element_count_must_match(self):
        with self.assertRaises(InvalidShapeError):
            _arange(2, 3).view(4, 2)
        with self.assertRaises(InvalidShapeError):
            _arange(2, 3).view(-1, -1)

    def test_view_of_offset_tensor_keeps_offset(self):
        row = _arange(3, 4).select(0, 1)
        v = row.view(2, 2)
        self.assertEqual(v.offset, 4)
        np.testing.assert_array_equal(v.to_numpy(), [[4, 5], [6, 7]])


class TestNarrowSelect(unittest.TestCase):
    def test_narrow_moves_offset(self):
        a = _arange(4, 3)
        n = a.narrow(0, 1, 2)
        self.assertEqual(n.shape, (2, 3))
        self.assertEqual(n.offset, 3)
        self.assertTrue(n.is_contiguous)
        np.testing.assert_array_equal(n.to_numpy(), [[3, 4, 5], [6, 7, 8]])

    def test_narrow_columns_is_not_contiguous(self):
        n = _arange(4, 3).narrow(1, 1, 2)
        self.assertFalse(n.is_contiguous)
        np.testing.assert_array_equal(n.to_numpy()[:, 0], [1, 4, 7, 10])

    def test_narrow_errors(self):
        a = _arange(4, 3)
        with self.assertRaises(IndexOutOfBoundsError):
            a.narrow(0, 3, 2)
        with self.assertRaises(IndexOutOfBoundsError):
            a.narrow(0, 5, 0)
        with self.assertRaises(InvalidShapeError):
            a.narrow(0, 0, -1)

    def test_select_drops_dim(self):
        a = _arange(2, 3, 4)
        s = a.select(1, 2)
        self.assertEqual(s.shape, (2, 4))
        self.assertEqual(s.strides, (12, 1))
        self.assertEqual(s.offset, 8)
        self.assertEqual(s[1, 3], a[1, 2, 3])

    def test_select_negative_index_and_errors(self):
        a = _arange(3, 2)
        self.assertEqual(a.select(0, -1)[0], 4.0)
        with self.assertRaises(IndexOutOfBoundsError):
            a.select(0, 3)
        with self.assertRaises(InvalidDimensionError):
            a.select(2, 0)

    def test_select_to_scalar(self):
        s = _arange(3).select(0, 2)
        self.assertEqual(s.shape, ())
        self.assertEqual(s[()], 2.0)


class TestUnsqueezeAsStrided(unittest.TestCase):
    def test_unsqueeze_keeps_contiguity(self):
        a = _arange(2, 3)
        for dim in (0, 1, 2, -1):
            with self.subTest(dim=dim):
                u = a.unsqueeze(dim)
                self.assertEqual(u.ndim, 3)
                self.assertTrue(u.is_contiguous)
        self.assertEqual(a.unsqueeze(1).shape, (2, 1, 3))

    def test_as_strided_window(self):
        a = _arange(6)
        w = a.as_strided((4, 3), (1, 1))
        self.assertFalse(w.is_contiguous)
        np.testing.assert_array_equal(w.to_numpy()[3], [3, 4, 5])

    def test_as_strided_is_validated(self):
        with self.assertRaises(InvalidViewError):
            _arange(6).as_strided((4, 3), (1, 1), offset=1)


if __name__ == "__main__":
    unittest.main()
