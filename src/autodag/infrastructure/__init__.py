"""
Concrete runtime of the differentiation engine: NumPy backends, settings,
the autograd runtime, the operation set and `Value`.
"""

from ._settings import AutogradSettings, configure, get_settings, settings_scope
from .backend import NumpyBackend, NumpyNativeGradients
from .autograd import (
    AutogradValueRegistry,
    BackwardConfig,
    Context,
    GradNode,
    enable_grad,
    is_grad_enabled,
    no_grad,
    reduce_to_shape,
    run_backward,
    set_grad_enabled,
)
from .ops import apply_operation, get_operation, register_operation
from .value import Value

__all__ = [
    "AutogradSettings",
    "configure",
    "get_settings",
    "settings_scope",
    "NumpyBackend",
    "NumpyNativeGradients",
    "AutogradValueRegistry",
    "BackwardConfig",
    "Context",
    "GradNode",
    "enable_grad",
    "is_grad_enabled",
    "no_grad",
    "reduce_to_shape",
    "run_backward",
    "set_grad_enabled",
    "apply_operation",
    "get_operation",
    "register_operation",
    "Value",
]
