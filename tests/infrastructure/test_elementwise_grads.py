import unittest

import numpy as np

from autodag import ShapeError, Value


def ones(*dims: int) -> Value:
    return Value.ones(dims)


class _AdditionGradCases:
    """Addition gradients with broadcasting, for every requires-grad combination."""

    native_expected = True

    def rand(self, *dims: int, requires_grad: bool) -> Value:
        v = Value.rand(dims, requires_grad=requires_grad)
        if not self.native_expected:
            v.grad_node.disable_native_gradient = True
        return v

    def assert_native_flag(self, *values: Value) -> None:
        for v in values:
            self.assertEqual(v.grad().is_native_gradient, self.native_expected)

    def test_scalar_value_addition(self):
        a = self.rand(2, 2, requires_grad=True)
        b = self.rand(requires_grad=True)

        c = a.add(b)
        c.backward(ones(2, 2).mul(2.0))

        self.assert_native_flag(a, b)
        self.assertEqual(b.grad().shape, ())
        self.assertEqual(b.grad().numel(), 1)
        self.assertAlmostEqual(b.grad().item(), 8.0, places=3)
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))

    def test_scalar_value_addition_reversed(self):
        a = self.rand(2, 2, requires_grad=True)
        b = self.rand(requires_grad=True)

        b.add(a).backward(ones(2, 2).mul(2.0))

        self.assertAlmostEqual(b.grad().item(), 8.0, places=3)
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))

    def test_scalar_value_second_without_requires_grad(self):
        a = self.rand(2, 2, requires_grad=True)
        b = self.rand(requires_grad=False)

        a.add(b).backward(ones(2, 2).mul(2.0))

        self.assert_native_flag(a)
        self.assertIsNone(b.grad())
        self.assertFalse(b.requires_grad)
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))

    def test_scalar_value_first_without_requires_grad(self):
        a = self.rand(2, 2, requires_grad=False)
        b = self.rand(requires_grad=True)

        c = a.add(b)
        self.assertTrue(c.requires_grad)
        c.backward(ones(2, 2).mul(2.0))

        self.assert_native_flag(b)
        self.assertIsNone(a.grad())
        self.assertAlmostEqual(b.grad().item(), 8.0, places=3)

    def test_unit_shape_broadcast_addition(self):
        a = self.rand(2, 2, requires_grad=True)
        b = self.rand(1, 1, requires_grad=True)

        a.add(b).backward(ones(2, 2).mul(2.0))

        self.assertEqual(b.grad().shape, (1, 1))
        np.testing.assert_allclose(b.grad().data, [[8.0]])
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))

    def test_value_addition(self):
        a = self.rand(2, 2, requires_grad=True)
        b = self.rand(2, 2, requires_grad=True)

        a.add(b).backward(ones(2, 2).mul(2.0))

        self.assert_native_flag(a, b)
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))
        np.testing.assert_allclose(b.grad().data, np.full((2, 2), 2.0))

    def test_broadcast_addition_leading_unit_axis(self):
        a = self.rand(2, 128, 128, requires_grad=True)
        b = self.rand(1, 128, 128, requires_grad=True)

        a.add(b).backward(ones(2, 128, 128).mul(2.0))

        self.assert_native_flag(a, b)
        np.testing.assert_allclose(a.grad().data, np.full((2, 128, 128), 2.0))
        np.testing.assert_allclose(b.grad().data, np.full((1, 128, 128), 4.0))

    def test_broadcast_addition_missing_axis(self):
        a = self.rand(2, 128, 65, requires_grad=True)
        b = self.rand(1, 65, requires_grad=True)

        a.add(b).backward(ones(2, 128, 65).mul(2.0))

        self.assert_native_flag(a, b)
        np.testing.assert_allclose(a.grad().data, np.full((2, 128, 65), 2.0))
        np.testing.assert_allclose(b.grad().data, np.full((1, 65), 512.0))

    def test_value_addition_first_without_requires_grad(self):
        a = self.rand(2, 2, requires_grad=False)
        b = self.rand(2, 2, requires_grad=True)

        a.add(b).backward(ones(2, 2).mul(2.0))

        self.assertIsNone(a.grad())
        np.testing.assert_allclose(b.grad().data, np.full((2, 2), 2.0))

    def test_python_scalar_addition(self):
        a = self.rand(2, 2, requires_grad=True)

        a.add(0.37).backward(ones(2, 2).mul(2.0))

        self.assert_native_flag(a)
        np.testing.assert_allclose(a.grad().data, np.full((2, 2), 2.0))


class TestAdditionGradsNative(_AdditionGradCases, unittest.TestCase):
    native_expected = True


class TestAdditionGradsSymbolic(_AdditionGradCases, unittest.TestCase):
    native_expected = False


class TestArithmeticGrads(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(0)
        self.a_np = rng.uniform(0.5, 2.0, size=(3, 4)).astype(np.float32)
        self.b_np = rng.uniform(0.5, 2.0, size=(4,)).astype(np.float32)
        self.g_np = rng.uniform(-1.0, 1.0, size=(3, 4)).astype(np.float32)

    def values(self):
        return (
            Value(self.a_np, requires_grad=True),
            Value(self.b_np, requires_grad=True),
        )

    def test_sub(self):
        a, b = self.values()
        (a - b).backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, self.g_np, rtol=1e-5)
        np.testing.assert_allclose(b.grad().data, -self.g_np.sum(axis=0), rtol=1e-5)

    def test_mul(self):
        a, b = self.values()
        (a * b).backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, self.g_np * self.b_np, rtol=1e-5)
        np.testing.assert_allclose(
            b.grad().data, (self.g_np * self.a_np).sum(axis=0), rtol=1e-5
        )

    def test_div(self):
        a, b = self.values()
        (a / b).backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, self.g_np / self.b_np, rtol=1e-5)
        expected_b = (-self.g_np * self.a_np / (self.b_np * self.b_np)).sum(axis=0)
        np.testing.assert_allclose(b.grad().data, expected_b, rtol=1e-4)

    def test_same_operand_twice(self):
        a, _ = self.values()
        (a * a).backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, 2 * self.a_np * self.g_np, rtol=1e-5)

    def test_neg(self):
        a, _ = self.values()
        (-a).backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, -self.g_np)

    def test_scalar_operations(self):
        cases = [
            (lambda a: a + 3.0, lambda x: np.ones_like(x)),
            (lambda a: a - 3.0, lambda x: np.ones_like(x)),
            (lambda a: 3.0 - a, lambda x: -np.ones_like(x)),
            (lambda a: a * 3.0, lambda x: np.full_like(x, 3.0)),
            (lambda a: 3.0 * a, lambda x: np.full_like(x, 3.0)),
            (lambda a: a / 4.0, lambda x: np.full_like(x, 0.25)),
            (lambda a: 4.0 / a, lambda x: -4.0 / (x * x)),
        ]
        for fn, dfn in cases:
            a, _ = self.values()
            fn(a).backward(self.g_np)
            np.testing.assert_allclose(
                a.grad().data, self.g_np * dfn(self.a_np), rtol=1e-5
            )

    def test_scalar_forward_values(self):
        a = Value([2.0, 4.0])
        np.testing.assert_allclose((a - 1).data, [1.0, 3.0])
        np.testing.assert_allclose((1 - a).data, [-1.0, -3.0])
        np.testing.assert_allclose((8 / a).data, [4.0, 2.0])
        np.testing.assert_allclose((a / 2).data, [1.0, 2.0])

    def test_array_operands_are_constants(self):
        a, _ = self.values()
        out = np.ones((3, 4), dtype=np.float32) * a
        self.assertTrue(out.requires_grad)
        out.backward(self.g_np)
        np.testing.assert_allclose(a.grad().data, self.g_np)

    def test_broadcast_conflict(self):
        a = Value.ones((2, 3))
        b = Value.ones((4,))
        with self.assertRaises(ShapeError) as ctx:
            a + b
        self.assertEqual(ctx.exception.op, "add")


if __name__ == "__main__":
    unittest.main()
