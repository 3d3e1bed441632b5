import gc
import unittest

import numpy as np

from autodag import AutogradValueRegistry, BackwardConfig, GradientStateError, Value


class TestAutogradValueRegistry(unittest.TestCase):

    def test_tracks_values_and_results(self):
        reg = AutogradValueRegistry.create("step")
        x = Value([1.0, 2.0], requires_grad=True, registry=reg, name="x")
        y = x * 2

        self.assertIs(y.registry, reg)
        self.assertEqual(len(reg), 2)
        self.assertIn(x, reg)
        self.assertIn(y, reg)
        self.assertNotIn(Value([1.0]), reg)
        self.assertEqual(reg.created_count, 2)
        self.assertIs(reg.find("x"), x)
        self.assertIsNone(reg.find("missing"))
        self.assertEqual(list(reg), [x, y])

    def test_does_not_keep_values_alive(self):
        reg = AutogradValueRegistry.create("scratch")
        x = Value([1.0], registry=reg)
        y = x + 1.0
        del y
        gc.collect()

        self.assertEqual(len(reg), 1)
        self.assertEqual(reg.values(), [x])
        self.assertEqual(reg.created_count, 2)

    def test_closed_registry_rejects_values(self):
        with AutogradValueRegistry.create("closed") as reg:
            x = Value([1.0], registry=reg)
            self.assertFalse(reg.closed)

        self.assertTrue(reg.closed)
        self.assertEqual(len(reg), 0)
        with self.assertRaises(GradientStateError):
            Value([2.0], registry=reg)
        with self.assertRaises(GradientStateError):
            x * 2

    def test_close_is_idempotent(self):
        reg = AutogradValueRegistry.create("twice")
        reg.close()
        reg.close()
        self.assertTrue(reg.closed)
        self.assertIn("closed", repr(reg))

    def test_backward_inside_scope(self):
        with AutogradValueRegistry.create("pass") as reg:
            x = Value.scalar(3.0, requires_grad=True, registry=reg)
            (x * x).backward()
            self.assertAlmostEqual(x.grad().item(), 6.0)
            self.assertIsNone(x.grad().registry)
            self.assertEqual(reg.values(), [x])

    def test_backward_after_scope_is_closed(self):
        with AutogradValueRegistry.create("fwd") as reg:
            x = Value.ones((2,), requires_grad=True, registry=reg)
            loss = (x * x).sum()

        self.assertTrue(reg.closed)
        loss.backward()
        np.testing.assert_allclose(x.grad().data, [2.0, 2.0])

    def test_symbolic_backward_after_scope_is_closed(self):
        with AutogradValueRegistry.create("fwd") as reg:
            a = Value.ones((2, 3), requires_grad=True, registry=reg)
            b = Value.ones((3, 2), requires_grad=True, registry=reg)
            out = a.matmul(b).sum()

        out.backward(config=BackwardConfig(keep_graph=True))
        np.testing.assert_allclose(a.grad().data, np.full((2, 3), 2.0))
        np.testing.assert_allclose(b.grad().data, np.full((3, 2), 2.0))

    def test_unregistered_values_have_no_registry(self):
        self.assertIsNone(Value([1.0]).registry)


if __name__ == "__main__":
    unittest.main()
