import unittest

import numpy as np

from autodag import ShapeError, Value


class TestGetTensor(unittest.TestCase):

    def test_span_slice_and_scatter_gradient(self):
        a = Value.ones((2, 3), requires_grad=True)
        b = a.get_tensor((0, 1), (1, 2))

        self.assertEqual(b.shape, (1, 2))
        self.assertTrue(b.requires_grad)

        b.backward(Value.ones((1, 2)))

        np.testing.assert_array_equal(a.grad().data.ravel(), [0, 1, 1, 0, 0, 0])
        self.assertTrue(a.grad().is_native_gradient)

    def test_span_slice_symbolic(self):
        a = Value.ones((2, 3), requires_grad=True)
        a.grad_node.disable_native_gradient = True
        a.get_tensor([0, 1], [1, 2]).backward(np.ones((1, 2)))
        np.testing.assert_array_equal(a.grad().data, [[0, 1, 1], [0, 0, 0]])
        self.assertFalse(a.grad().is_native_gradient)

    def test_span_minus_one_length_selects_and_drops(self):
        a = Value(np.arange(6).reshape(2, 3))
        b = a.get_tensor((1, 0), (-1, 2))
        np.testing.assert_array_equal(b.data, [3, 4])

    def test_index_form_keeps_and_selects(self):
        a = Value.full((2, 2), -4.0, requires_grad=True)
        c = a.get_tensor(-1, 0)
        np.testing.assert_array_equal(c.data, [-4.0, -4.0])

    def test_index_form(self):
        a = Value(np.arange(6).reshape(2, 3))
        np.testing.assert_array_equal(a.get_tensor(1).data, [3, 4, 5])
        np.testing.assert_array_equal(a.get_tensor(-1, 2).data, [2, 5])
        self.assertEqual(a.get_tensor(1, 2).shape, ())

    def test_out_of_bounds(self):
        a = Value.ones((2, 3))
        with self.assertRaises(ShapeError):
            a.get_tensor((0, 1), (1, 3))
        with self.assertRaises(ShapeError):
            a.get_tensor(2)
        with self.assertRaises(ShapeError):
            a.get_tensor((0,), (1, 1))

    def test_slice_result_is_independent(self):
        a = Value(np.arange(6).reshape(2, 3))
        b = a.get_tensor(0)
        b.data[0] = 100.0
        self.assertEqual(a.data[0, 0], 0.0)


class TestGetItem(unittest.TestCase):

    def test_basic_keys(self):
        a = Value(np.arange(12).reshape(3, 4), requires_grad=True)
        np.testing.assert_array_equal(a[1].data, [4, 5, 6, 7])
        np.testing.assert_array_equal(a[:, 1:3].data, np.arange(12).reshape(3, 4)[:, 1:3])
        np.testing.assert_array_equal(a[-1, -1].data, 11)

    def test_getitem_gradient(self):
        a = Value(np.arange(12).reshape(3, 4), requires_grad=True)
        a[1:, 2].backward(Value([1.0, 2.0]))
        expected = np.zeros((3, 4))
        expected[1, 2] = 1.0
        expected[2, 2] = 2.0
        np.testing.assert_array_equal(a.grad().data, expected)

    def test_unsupported_keys(self):
        a = Value.ones((3, 4))
        with self.assertRaises(ShapeError):
            a[::2]
        with self.assertRaises(ShapeError):
            a[0, 0, 0]
        with self.assertRaises(TypeError):
            a["x"]

    def test_scatter(self):
        a = Value([1.0, 2.0], requires_grad=True)
        s = a.scatter((1, slice(0, 2)), (2, 3))
        np.testing.assert_array_equal(s.data, [[0, 0, 0], [1, 2, 0]])
        s.backward(np.arange(6).reshape(2, 3))
        np.testing.assert_array_equal(a.grad().data, [3.0, 4.0])
        with self.assertRaises(ShapeError):
            a.scatter((1, slice(0, 3)), (2, 3))


if __name__ == "__main__":
    unittest.main()
