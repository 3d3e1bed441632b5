"""
Operation registry and the single entry point that records operations.

Every differentiable operation is a `Function` subclass registered for one
`OperationKind`. Value methods never compute results themselves; they call
`apply_operation`, which runs the forward kernel and, when history must be
recorded, attaches an operation `GradNode` to the result.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Type

from ...domain._function import Function
from ...domain._operation import OperationKind
from ...domain._value import IValue
from ..autograd._context import Context
from ..autograd._gradient_node import GradNode
from ..autograd._grad_mode import is_grad_enabled
from ..autograd._registry import registration_suspended

_OPERATIONS: Dict[OperationKind, Type[Function]] = {}


def register_operation(
    kind: OperationKind,
) -> Callable[[Type[Function]], Type[Function]]:
    """
    Class decorator binding a `Function` subclass to `kind`.

    Raises
    ------
    ValueError
        If `kind` already has a registered implementation.
    """

    def decorator(fn: Type[Function]) -> Type[Function]:
        if kind in _OPERATIONS:
            raise ValueError(
                f"Operation {kind} is already registered to {_OPERATIONS[kind].__name__}"
            )
        fn.kind = kind
        _OPERATIONS[kind] = fn
        return fn

    return decorator


def get_operation(kind: OperationKind) -> Type[Function]:
    """
    Return the `Function` registered for `kind`.

    Raises
    ------
    NotImplementedError
        If no implementation is registered.
    """
    try:
        return _OPERATIONS[kind]
    except KeyError:
        raise NotImplementedError(f"No operation registered for {kind}") from None


def registered_operations() -> FrozenSet[OperationKind]:
    return frozenset(_OPERATIONS)


def apply_operation(kind: OperationKind, *operands: IValue, **meta: Any) -> IValue:
    """
    Run operation `kind` on `operands` and record it if needed.

    Parameters
    ----------
    kind : OperationKind
        Operation to run.
    *operands : IValue
        Value operands; the result has the class and registry of the first.
    **meta
        Non-Value arguments (scalars, shapes, slicing keys). They are stored
        in `ctx.saved_meta` and are available to forward and backward.

    Returns
    -------
    IValue
        The result, registered with the first operand's registry except
        during a backward pass. It requires grad iff grad mode is enabled and any operand
        requires grad; only then does it own an operation node. That node
        disables native gradients if any operand's node does.
    """
    fn = get_operation(kind)
    first = operands[0]

    ctx = Context(
        parents=tuple(operands),
        operation=kind,
        backward_fn=fn.backward,
        saved_meta=dict(meta),
    )
    data = fn.forward(ctx, *(o.data for o in operands))

    registry = None if registration_suspended() else first.registry
    out = type(first)(data, registry=registry, dtype=data.dtype)
    if is_grad_enabled() and any(o.requires_grad for o in operands):
        disable = any(o.grad_node.disable_native_gradient for o in operands)
        node = GradNode(ctx, disable_native_gradient=disable)
        out._attach_grad_node(node)
        for o in operands:
            if o.is_leaf:
                o._add_consumer(node)
    return out
