"""
Computation-graph runtime: gradient nodes, grad mode and the backward engine.

Importing this package registers the native and symbolic control paths of
`GradNode.apply`.
"""

from ._context import Context
from ._gradient_node import GradNode
from ._dispatch import *
from ._grad_mode import enable_grad, is_grad_enabled, no_grad, set_grad_enabled
from ._backward_config import BackwardConfig
from ._engine import reduce_to_shape, run_backward
from ._registry import AutogradValueRegistry

__all__ = [
    Context.__name__,
    GradNode.__name__,
    BackwardConfig.__name__,
    AutogradValueRegistry.__name__,
    "enable_grad",
    "is_grad_enabled",
    "no_grad",
    "set_grad_enabled",
    "reduce_to_shape",
    "run_backward",
]
