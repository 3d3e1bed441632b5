"""
Native and symbolic control paths of `GradNode.apply`.

Importing this module registers both paths on `GradNode`; the active path is
chosen per call from `GradNode.strategy`.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ...domain._strategy import GradientStrategy
from ...domain._value import IValue
from ...domain.utils import create_path_builder
from .._settings import get_settings
from ._gradient_node import GradNode

logger = logging.getLogger(__name__)

__all__ = []

grad_node_control_path_manager = create_path_builder("strategy")


@grad_node_control_path_manager(GradNode, GradNode.apply, GradientStrategy.NATIVE)
def grad_node_apply_native(
    self: GradNode, grad_out: IValue
) -> Tuple[Optional[IValue], ...]:
    """
    Compute parent gradients with the native gradient backend.

    The raw arrays returned by the backend are wrapped into Values of the
    same class as `grad_out`, flagged as native gradients. They never
    require grad.
    """
    native = get_settings().native_gradients
    logger.debug("native vjp for %s", self.operation)
    raw = native.vjp(self.operation, self.context, grad_out.data)
    value_cls = type(grad_out)

    grads = []
    for r in raw:
        if r is None:
            grads.append(None)
            continue
        g = value_cls(r, dtype=r.dtype)
        g._mark_native_gradient()
        grads.append(g)
    return tuple(grads)


@grad_node_control_path_manager(GradNode, GradNode.apply, GradientStrategy.SYMBOLIC)
def grad_node_apply_symbolic(
    self: GradNode, grad_out: IValue
) -> Tuple[Optional[IValue], ...]:
    """
    Compute parent gradients by replaying the operation's backward rule.

    The rule is built from Value operations, so with grad mode enabled its
    results are recorded and differentiable.
    """
    logger.debug("symbolic backward for %s", self.operation)
    return tuple(self.context.backward_fn(self.context, grad_out))
