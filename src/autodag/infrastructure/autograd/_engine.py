"""
Reverse-mode backward engine.

`run_backward` propagates a seed gradient from a root Value to every Value
in its history that requires grad, accumulating into their gradient slots.

Algorithm
---------
1) Build a reverse topological order of the Values reachable from the root
   through parents that require grad (iterative depth-first search).
2) Walk that order carrying a table of pending gradients. Each Value with a
   pending gradient accumulates it into its slot; operation nodes then
   produce per-parent gradients which are summed into the table.
3) Without `keep_graph`, each consumed operation node is released. With
   `keep_graph`, the walk runs with grad mode enabled so all produced
   gradients are recorded and can be differentiated again.
"""

from __future__ import annotations

import logging
from numbers import Number
from typing import Any, Dict, List, Optional, Sequence

from ...domain._errors import GradientStateError, ShapeError
from ...domain._size import Size, SizeLike
from ...domain._value import IValue
from .._settings import get_settings
from ._backward_config import BackwardConfig
from ._grad_mode import set_grad_enabled
from ._registry import suspend_registration

logger = logging.getLogger(__name__)


def reduce_to_shape(grad: IValue, shape: SizeLike) -> IValue:
    """
    Sum `grad` over broadcast dimensions so it matches `shape` exactly.

    Leading dimensions absent from `shape` and dimensions stretched from 1
    are summed out. The reduction is a recorded operation, so it stays
    differentiable inside symbolic backward rules.

    Parameters
    ----------
    grad : IValue
        Gradient shaped like a broadcast result.
    shape : Size | tuple[int, ...]
        Shape of the operand before broadcasting.

    Returns
    -------
    IValue
        `grad` itself when shapes already match, otherwise the reduced Value.

    Raises
    ------
    ShapeError
        If `shape` could not have been broadcast to `grad.shape`.
    """
    target = Size.of(shape).dimensions()
    if tuple(grad.shape) == target:
        return grad
    return grad.sum_to_shape(target)


def _topological_order(root: IValue) -> List[IValue]:
    """
    Return the Values reachable from `root` in reverse topological order.

    Only parents that require grad are followed. Each Value appears once and
    before all of its parents.

    Raises
    ------
    GradientStateError
        If a reachable node was released by an earlier pass.
    """
    order: List[IValue] = []
    visited: set[int] = set()
    stack: List[tuple[IValue, bool]] = [(root, False)]

    while stack:
        value, expanded = stack.pop()
        if expanded:
            order.append(value)
            continue
        if id(value) in visited:
            continue
        visited.add(id(value))

        node = value.grad_node
        node.check_usable()

        stack.append((value, True))
        for parent in node.parents:
            if parent.requires_grad and id(parent) not in visited:
                stack.append((parent, False))

    order.reverse()
    return order


def _make_seed(root: IValue, grad_output: Any) -> IValue:
    value_cls = type(root)
    settings = get_settings()

    if grad_output is None:
        if root.numel() != 1:
            raise ValueError(
                "backward: grad_output must be provided for a non-scalar root "
                f"(shape={tuple(root.shape)})"
            )
        return value_cls(settings.backend.ones(tuple(root.shape), settings.dtype))

    if isinstance(grad_output, value_cls):
        seed = grad_output
    elif isinstance(grad_output, Number):
        seed = value_cls(
            settings.backend.full(tuple(root.shape), float(grad_output), settings.dtype)
        )
    else:
        seed = value_cls(grad_output)

    if tuple(seed.shape) != tuple(root.shape):
        raise ShapeError(
            "backward",
            f"grad_output shape {tuple(seed.shape)} does not match root shape "
            f"{tuple(root.shape)}",
            shapes=(tuple(seed.shape), tuple(root.shape)),
        )
    return seed


def _accumulate(value: IValue, grad: IValue, keep_graph: bool) -> None:
    """
    Add `grad` into the gradient slot of `value`.

    The first contribution stores a copy (a recorded clone when
    `keep_graph`). Later contributions either replace the slot with the
    recorded sum (`keep_graph`) or add into the existing slot in place, so a
    previously read gradient object keeps reflecting the total.

    Only leaf gradients are flagged native, after the most recent
    contribution.
    """
    slot = value._grad_slot
    if slot is None:
        slot = grad.clone()
    elif keep_graph:
        slot = slot.add(grad)
    else:
        get_settings().backend.add_(slot.data, grad.data)
    if value.is_leaf:
        slot._is_native_gradient = grad.is_native_gradient
    value._grad_slot = slot


def _validate_grads(
    node: Any, parents: Sequence[IValue], grads: Sequence[Optional[IValue]]
) -> None:
    if len(grads) != len(parents):
        raise GradientStateError(
            "backward",
            f"'{node.operation}' returned {len(grads)} gradients for "
            f"{len(parents)} parents",
        )
    for parent, g in zip(parents, grads):
        if g is not None and tuple(g.shape) != tuple(parent.shape):
            raise ShapeError(
                str(node.operation),
                f"gradient shape {tuple(g.shape)} does not match parent "
                f"shape {tuple(parent.shape)}",
                shapes=(tuple(g.shape), tuple(parent.shape)),
            )


def run_backward(
    root: IValue,
    grad_output: Any = None,
    config: Optional[BackwardConfig] = None,
) -> None:
    """
    Backpropagate from `root` and accumulate gradients into the graph.

    Parameters
    ----------
    root : IValue
        Value to differentiate. Must require grad.
    grad_output : IValue | array-like | Number, optional
        Seed gradient with the shape of `root`. May be omitted only when
        `root` holds exactly one element, in which case ones are used.
    config : BackwardConfig, optional
        Pass options; defaults to `BackwardConfig()`.

    Raises
    ------
    GradientStateError
        If `root` does not require grad, or the pass reaches a node released
        by an earlier pass run without `keep_graph`.
    ValueError
        If `grad_output` is omitted for a root with more than one element.
    ShapeError
        If the seed or a produced gradient has the wrong shape.
    """
    config = config if config is not None else BackwardConfig()

    if not root.requires_grad:
        raise GradientStateError(
            "backward",
            "value does not require grad and has no graph to differentiate",
        )

    seed = _make_seed(root, grad_output)
    order = _topological_order(root)
    keep_graph = config.keep_graph

    logger.debug(
        "backward start: %d values, keep_graph=%s", len(order), keep_graph
    )

    pending: Dict[int, IValue] = {id(root): seed}
    released = 0

    with set_grad_enabled(keep_graph), suspend_registration():
        for value in order:
            grad = pending.pop(id(value), None)
            if grad is None:
                continue

            _accumulate(value, grad, keep_graph)

            node = value.grad_node
            if node.is_leaf:
                continue

            parents = tuple(node.parents)
            grads = node.apply(grad)
            _validate_grads(node, parents, grads)

            for parent, g in zip(parents, grads):
                if g is None or not parent.requires_grad:
                    continue
                prev = pending.get(id(parent))
                if prev is not None:
                    native = prev.is_native_gradient and g.is_native_gradient
                    g = prev.add(g)
                    if native:
                        g._mark_native_gradient()
                pending[id(parent)] = g

            if not keep_graph:
                node.release()
                released += 1

    logger.debug("backward done: released %d nodes", released)
