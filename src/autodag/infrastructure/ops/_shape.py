"""
Reshaping operations.

`RESHAPE` returns a view of the input when the memory layout allows it and
a copy otherwise. `VIEW` never copies and rejects layouts that would need
one. Both accept a single `-1` dimension inferred from the element count.
"""

from typing import Sequence, Tuple

from ...domain._errors import ShapeError
from ...domain._function import Function
from ...domain._operation import OperationKind
from .._settings import get_settings
from ._registry import register_operation

__all__ = ["Reshape", "View", "resolve_shape"]


def resolve_shape(op: str, shape: Sequence[int], numel: int) -> Tuple[int, ...]:
    """
    Resolve a requested shape against an element count.

    Raises
    ------
    ShapeError
        If more than one `-1` is given, a dimension is negative, or the
        element counts differ.
    """
    dims = [int(d) for d in shape]
    inferred = [i for i, d in enumerate(dims) if d == -1]
    if len(inferred) > 1:
        raise ShapeError(op, "only one dimension can be -1", shapes=(dims,))
    if any(d < -1 for d in dims):
        raise ShapeError(op, f"invalid dimension in {tuple(dims)}")

    known = 1
    for d in dims:
        if d != -1:
            known *= d

    if inferred:
        if known == 0 or numel % known != 0:
            raise ShapeError(
                op, f"cannot infer -1 in {tuple(dims)} for {numel} elements"
            )
        dims[inferred[0]] = numel // known
    elif known != numel:
        raise ShapeError(
            op,
            f"shape {tuple(dims)} has {known} elements, expected {numel}",
            shapes=(dims,),
        )
    return tuple(dims)


@register_operation(OperationKind.RESHAPE)
class Reshape(Function):
    @staticmethod
    def forward(ctx, a):
        shape = resolve_shape("reshape", ctx.saved_meta["shape"], a.size)
        ctx.saved_meta["shape"] = shape
        ctx.saved_meta["src_shape"] = a.shape
        return get_settings().backend.reshape(a, shape)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.reshape(ctx.saved_meta["src_shape"]),)


@register_operation(OperationKind.VIEW)
class View(Function):
    @staticmethod
    def forward(ctx, a):
        shape = resolve_shape("view", ctx.saved_meta["shape"], a.size)
        out = get_settings().backend.view(a, shape)
        if out is None:
            raise ShapeError(
                "view",
                f"layout of {a.shape} cannot be viewed as {shape} without "
                "copying; use reshape",
                shapes=(a.shape, shape),
            )
        ctx.saved_meta["shape"] = shape
        ctx.saved_meta["src_shape"] = a.shape
        return out

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.reshape(ctx.saved_meta["src_shape"]),)
