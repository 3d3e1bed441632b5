"""
autodag: a reverse-mode automatic differentiation engine.

Operations composed on `Value` objects build a computation graph;
`Value.backward` computes gradients of any output with respect to every
Value that requires grad, including gradients of gradients when the pass
keeps its graph.

Examples
--------
>>> from autodag import Value, BackwardConfig
>>> x = Value.scalar(0.5, requires_grad=True)
>>> y = x * x
>>> y.backward(config=BackwardConfig(keep_graph=True))
>>> x.grad().item()
1.0
"""

from .domain import (
    GradientStateError,
    GradientStrategy,
    OperationKind,
    ShapeError,
    Size,
    broadcast_shape,
)
from .infrastructure import (
    AutogradSettings,
    AutogradValueRegistry,
    BackwardConfig,
    GradNode,
    Value,
    configure,
    enable_grad,
    get_settings,
    is_grad_enabled,
    no_grad,
    reduce_to_shape,
    run_backward,
    set_grad_enabled,
    settings_scope,
)

__version__ = "0.1.0"

__all__ = [
    "GradientStateError",
    "GradientStrategy",
    "OperationKind",
    "ShapeError",
    "Size",
    "broadcast_shape",
    "AutogradSettings",
    "AutogradValueRegistry",
    "BackwardConfig",
    "GradNode",
    "Value",
    "configure",
    "enable_grad",
    "get_settings",
    "is_grad_enabled",
    "no_grad",
    "reduce_to_shape",
    "run_backward",
    "set_grad_enabled",
    "settings_scope",
]
