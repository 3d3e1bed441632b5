"""
Full reduction and the broadcast / inverse-broadcast pair.

`BROADCAST_TO` and `SUM_TO_SHAPE` are each other's backward rule, which is
what keeps broadcast-reducing gradient rules differentiable.
"""

from ...domain._errors import ShapeError
from ...domain._function import Function
from ...domain._operation import OperationKind
from ...domain._size import Size, broadcast_shape
from .._settings import get_settings
from ..autograd._engine import reduce_to_shape
from ._registry import register_operation

__all__ = ["Sum", "BroadcastTo", "SumToShape"]


@register_operation(OperationKind.SUM)
class Sum(Function):
    """Sum of all elements into a 0-d Value."""

    @staticmethod
    def forward(ctx, a):
        ctx.saved_meta["src_shape"] = a.shape
        return get_settings().backend.sum_all(a)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.broadcast_to(ctx.saved_meta["src_shape"]),)


@register_operation(OperationKind.BROADCAST_TO)
class BroadcastTo(Function):
    @staticmethod
    def forward(ctx, a):
        shape = Size.of(ctx.saved_meta["shape"]).dimensions()
        if broadcast_shape(a.shape, shape) != shape:
            raise ShapeError(
                "broadcast_to",
                f"cannot broadcast {a.shape} to {shape}",
                shapes=(a.shape, shape),
            )
        ctx.saved_meta["shape"] = shape
        ctx.saved_meta["src_shape"] = a.shape
        return get_settings().backend.broadcast_to(a, shape)

    @staticmethod
    def backward(ctx, grad_out):
        return (reduce_to_shape(grad_out, ctx.saved_meta["src_shape"]),)


@register_operation(OperationKind.SUM_TO_SHAPE)
class SumToShape(Function):
    """Inverse of broadcasting: sum over the axes a broadcast would stretch."""

    @staticmethod
    def forward(ctx, a):
        shape = Size.of(ctx.saved_meta["shape"]).dimensions()
        ctx.saved_meta["shape"] = shape
        ctx.saved_meta["src_shape"] = a.shape
        return get_settings().backend.sum_to_shape(a, shape)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.broadcast_to(ctx.saved_meta["src_shape"]),)
