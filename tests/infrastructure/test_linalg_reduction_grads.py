import unittest

import numpy as np

from autodag import ShapeError, Size, Value


class TestMatmul(unittest.TestCase):

    def test_batched_matmul_shapes_and_grads(self):
        left = Value.full(Size(Size(2, 128), Size(512)), -2.0, requires_grad=True)
        right = Value.full((512, 65), 1.0, requires_grad=True)

        result = left.matmul(right)
        self.assertEqual(result.size(), Size(2, 128, 65))
        np.testing.assert_allclose(result.data, np.full((2, 128, 65), -1024.0))

        result.backward(Value.ones(result.size()))

        self.assertTrue(left.grad().is_native_gradient)
        self.assertTrue(right.grad().is_native_gradient)
        self.assertEqual(left.grad().size(), Size(2, 128, 512))
        self.assertEqual(right.grad().size(), Size(512, 65))
        np.testing.assert_allclose(left.grad().data, np.full((2, 128, 512), 65.0))
        np.testing.assert_allclose(right.grad().data, np.full((512, 65), -512.0))

    def test_matmul_grads_match_numpy(self):
        rng = np.random.default_rng(1)
        a_np = rng.standard_normal((3, 4)).astype(np.float32)
        b_np = rng.standard_normal((2, 4, 5)).astype(np.float32)
        g_np = rng.standard_normal((2, 3, 5)).astype(np.float32)

        a = Value(a_np, requires_grad=True)
        b = Value(b_np, requires_grad=True)
        (a @ b).backward(g_np)

        expected_a = (g_np @ np.swapaxes(b_np, -1, -2)).sum(axis=0)
        expected_b = np.swapaxes(np.broadcast_to(a_np, (2, 3, 4)), -1, -2) @ g_np
        np.testing.assert_allclose(a.grad().data, expected_a, rtol=1e-4, atol=1e-5)
        np.testing.assert_allclose(b.grad().data, expected_b, rtol=1e-4, atol=1e-5)

    def test_matmul_shape_errors(self):
        with self.assertRaises(ShapeError):
            Value.ones((3,)).matmul(Value.ones((3, 2)))
        with self.assertRaises(ShapeError):
            Value.ones((2, 3)).matmul(Value.ones((2, 3)))
        with self.assertRaises(ShapeError):
            Value.ones((2, 2, 3)).matmul(Value.ones((3, 3, 2)))
        with self.assertRaises(TypeError):
            Value.ones((2, 2)).matmul(2.0)

    def test_transpose_grad(self):
        a = Value(np.arange(6).reshape(2, 3), requires_grad=True)
        g = np.arange(6, dtype=np.float32).reshape(3, 2)
        a.t().backward(g)
        np.testing.assert_array_equal(a.grad().data, g.T)


class TestReluAndReductions(unittest.TestCase):

    def test_relu(self):
        a = Value([-2.0, -0.5, 0.0, 0.5, 3.0], requires_grad=True)
        r = a.relu()
        np.testing.assert_array_equal(r.data, [0.0, 0.0, 0.0, 0.5, 3.0])
        r.backward(Value.full((5,), 2.0))
        np.testing.assert_array_equal(a.grad().data, [0.0, 0.0, 0.0, 2.0, 2.0])

    def test_sum(self):
        a = Value.full((2, 2), -4.0, requires_grad=True).name_("a")
        c = a.sum()
        self.assertEqual(c.shape, ())
        self.assertEqual(c.item(), -16.0)

        c.backward()

        np.testing.assert_array_equal(a.grad().data, np.ones((2, 2)))
        self.assertTrue(a.grad().is_native_gradient)

    def test_broadcast_to(self):
        a = Value([[1.0], [2.0]], requires_grad=True)
        b = a.broadcast_to((3, 2, 4))
        self.assertEqual(b.shape, (3, 2, 4))
        b.backward(np.ones((3, 2, 4)))
        np.testing.assert_array_equal(a.grad().data, [[12.0], [12.0]])
        with self.assertRaises(ShapeError):
            a.broadcast_to((3, 3))

    def test_sum_to_shape(self):
        a = Value(np.ones((2, 3, 4)), requires_grad=True)
        b = a.sum_to_shape((3, 1))
        np.testing.assert_array_equal(b.data, np.full((3, 1), 8.0))
        b.backward(Value([[1.0], [2.0], [3.0]]))
        expected = np.broadcast_to(np.array([[1.0], [2.0], [3.0]]), (2, 3, 4))
        np.testing.assert_array_equal(a.grad().data, expected)
        with self.assertRaises(ShapeError):
            a.sum_to_shape((2, 3))

    def test_reshape_and_view_grads(self):
        a = Value(np.arange(6), requires_grad=True)
        a.reshape(2, 3).backward(np.arange(6).reshape(2, 3))
        np.testing.assert_array_equal(a.grad().data, np.arange(6))

        b = Value(np.arange(6), requires_grad=True)
        b.view(3, 2).backward(np.ones((3, 2)))
        np.testing.assert_array_equal(b.grad().data, np.ones(6))


if __name__ == "__main__":
    unittest.main()
