import os
import unittest
from unittest import mock

import numpy as np

from autodag import (
    AutogradSettings,
    BackwardConfig,
    GradientStrategy,
    OperationKind,
    Value,
    configure,
    get_settings,
    no_grad,
    settings_scope,
)
from autodag.infrastructure import NumpyNativeGradients
from autodag.infrastructure._settings import STRATEGY_ENV_VAR

NODE_LOGGER = "autodag.infrastructure.autograd._gradient_node"


def _network(x: Value, w: Value, b: Value) -> Value:
    h = x.matmul(w).add(b).relu()
    return h.mul(h).sum().div(4.0) - h.get_tensor(0).sum()


class TestStrategyResolution(unittest.TestCase):

    def test_leaf_nodes_are_symbolic(self):
        self.assertIs(Value.ones((2,)).grad_node.strategy, GradientStrategy.SYMBOLIC)

    def test_operation_node_is_native_outside_grad_mode(self):
        a = Value.ones((2,), requires_grad=True)
        node = (a * a).grad_node
        with no_grad():
            self.assertIs(node.strategy, GradientStrategy.NATIVE)
        self.assertIs(node.strategy, GradientStrategy.SYMBOLIC)

    def test_settings_force_symbolic(self):
        a = Value.ones((2,), requires_grad=True)
        node = (a * a).grad_node
        with no_grad():
            with settings_scope(default_strategy=GradientStrategy.SYMBOLIC):
                self.assertIs(node.strategy, GradientStrategy.SYMBOLIC)
            with settings_scope(native_gradients=None):
                self.assertIs(node.strategy, GradientStrategy.SYMBOLIC)
            with settings_scope(
                native_gradients=NumpyNativeGradients(unsupported=[OperationKind.MUL])
            ):
                self.assertIs(node.strategy, GradientStrategy.SYMBOLIC)
            self.assertIs(node.strategy, GradientStrategy.NATIVE)

    def test_disable_flag_is_inherited_by_results(self):
        a = Value.ones((2,), requires_grad=True)
        b = Value.ones((2,), requires_grad=True)
        a.grad_node.disable_native_gradient = True

        c = a * b
        d = c + 1.0
        e = b * b

        self.assertTrue(c.grad_node.disable_native_gradient)
        self.assertTrue(d.grad_node.disable_native_gradient)
        self.assertFalse(e.grad_node.disable_native_gradient)
        with no_grad():
            self.assertIs(d.grad_node.strategy, GradientStrategy.SYMBOLIC)
            self.assertIs(e.grad_node.strategy, GradientStrategy.NATIVE)

    def test_keep_graph_falls_back_to_symbolic_and_logs(self):
        a = Value.scalar(3.0, requires_grad=True)
        with self.assertLogs(NODE_LOGGER, level="DEBUG") as logs:
            (a * a).backward(config=BackwardConfig(keep_graph=True))
        self.assertTrue(any("using symbolic" in line for line in logs.output))
        self.assertFalse(a.grad().is_native_gradient)
        self.assertTrue(a.grad().requires_grad)


class TestStrategyEquivalence(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(3)
        self.x = rng.standard_normal((4, 3)).astype(np.float32)
        self.w = rng.standard_normal((3, 5)).astype(np.float32)
        self.b = rng.standard_normal((5,)).astype(np.float32)

    def _grads(self):
        x = Value(self.x)
        w = Value(self.w, requires_grad=True)
        b = Value(self.b, requires_grad=True)
        _network(x, w, b).backward()
        return w.grad(), b.grad()

    def test_native_and_symbolic_agree(self):
        w_native, b_native = self._grads()
        with settings_scope(default_strategy=GradientStrategy.SYMBOLIC):
            w_symbolic, b_symbolic = self._grads()

        self.assertTrue(w_native.is_native_gradient)
        self.assertFalse(w_symbolic.is_native_gradient)
        np.testing.assert_allclose(w_native.data, w_symbolic.data, rtol=1e-5, atol=1e-6)
        np.testing.assert_allclose(b_native.data, b_symbolic.data, rtol=1e-5, atol=1e-6)

    def test_without_native_backend(self):
        w_native, _ = self._grads()
        with settings_scope(native_gradients=None):
            w_symbolic, _ = self._grads()
        self.assertFalse(w_symbolic.is_native_gradient)
        np.testing.assert_allclose(w_native.data, w_symbolic.data, rtol=1e-5, atol=1e-6)

    def test_partially_supported_backend(self):
        unsupported = NumpyNativeGradients(unsupported=[OperationKind.ADD])
        with settings_scope(native_gradients=unsupported):
            a = Value([1.0, 2.0], requires_grad=True)
            b = Value([3.0, 4.0], requires_grad=True)
            (a + b).backward(np.ones(2))
            self.assertFalse(a.grad().is_native_gradient)

            c = Value([1.0, 2.0], requires_grad=True)
            (c * b).backward(np.ones(2))
            self.assertTrue(c.grad().is_native_gradient)
            np.testing.assert_allclose(c.grad().data, [3.0, 4.0])


class TestSettings(unittest.TestCase):

    def test_configure_rejects_unknown_keys(self):
        before = get_settings()
        with self.assertRaises(TypeError):
            configure(no_such_field=1)
        self.assertIs(get_settings(), before)

    def test_settings_scope_restores(self):
        before = get_settings()
        with settings_scope(dtype=np.float64) as scoped:
            self.assertIs(get_settings(), scoped)
            self.assertEqual(Value.ones((2,)).dtype, np.float64)
        self.assertIs(get_settings(), before)
        self.assertEqual(Value.ones((2,)).dtype, np.float32)

    def test_configure_replaces_settings(self):
        before = get_settings()
        try:
            updated = configure(default_strategy=GradientStrategy.SYMBOLIC)
            self.assertIs(get_settings(), updated)
        finally:
            configure(default_strategy=before.default_strategy)

    def test_strategy_from_environment(self):
        with mock.patch.dict(os.environ, {STRATEGY_ENV_VAR: "Symbolic"}):
            self.assertIs(AutogradSettings().default_strategy, GradientStrategy.SYMBOLIC)

    def test_invalid_environment_strategy_warns(self):
        with mock.patch.dict(os.environ, {STRATEGY_ENV_VAR: "fastest"}):
            with self.assertWarns(RuntimeWarning):
                settings = AutogradSettings()
        self.assertIs(settings.default_strategy, GradientStrategy.NATIVE)

    def test_strategy_parse(self):
        self.assertIs(GradientStrategy.parse(" NATIVE "), GradientStrategy.NATIVE)
        with self.assertRaises(ValueError):
            GradientStrategy.parse("other")


if __name__ == "__main__":
    unittest.main()
