"""
Broadcasting binary elementwise operations: add, sub, mul, div.

Forward kernels broadcast their operands; backward rules reduce each
gradient back to its operand's shape with `reduce_to_shape`.
"""

from ...domain._function import Function
from ...domain._operation import OperationKind
from ...domain._errors import ShapeError
from ...domain._size import Size
from .._settings import get_settings
from ..autograd._engine import reduce_to_shape
from ._registry import register_operation

__all__ = ["Add", "Sub", "Mul", "Div"]


def _check_broadcast(op: str, a, b) -> None:
    if not Size.of(a.shape).is_broadcast_compatible(b.shape):
        raise ShapeError(
            op,
            f"shapes {a.shape} and {b.shape} are not broadcast-compatible",
            shapes=(a.shape, b.shape),
        )


@register_operation(OperationKind.ADD)
class Add(Function):
    @staticmethod
    def forward(ctx, a, b):
        _check_broadcast("add", a, b)
        return get_settings().backend.add(a, b)

    @staticmethod
    def backward(ctx, grad_out):
        a, b = ctx.parents
        return (
            reduce_to_shape(grad_out, a.shape) if a.requires_grad else None,
            reduce_to_shape(grad_out, b.shape) if b.requires_grad else None,
        )


@register_operation(OperationKind.SUB)
class Sub(Function):
    @staticmethod
    def forward(ctx, a, b):
        _check_broadcast("sub", a, b)
        return get_settings().backend.sub(a, b)

    @staticmethod
    def backward(ctx, grad_out):
        a, b = ctx.parents
        return (
            reduce_to_shape(grad_out, a.shape) if a.requires_grad else None,
            reduce_to_shape(grad_out.neg(), b.shape) if b.requires_grad else None,
        )


@register_operation(OperationKind.MUL)
class Mul(Function):
    """d(a*b) = (g*b, g*a)"""

    @staticmethod
    def forward(ctx, a, b):
        _check_broadcast("mul", a, b)
        return get_settings().backend.mul(a, b)

    @staticmethod
    def backward(ctx, grad_out):
        a, b = ctx.parents
        return (
            reduce_to_shape(grad_out.mul(b), a.shape) if a.requires_grad else None,
            reduce_to_shape(grad_out.mul(a), b.shape) if b.requires_grad else None,
        )


@register_operation(OperationKind.DIV)
class Div(Function):
    """d(a/b) = (g/b, -g*a/b^2)"""

    @staticmethod
    def forward(ctx, a, b):
        _check_broadcast("div", a, b)
        return get_settings().backend.div(a, b)

    @staticmethod
    def backward(ctx, grad_out):
        a, b = ctx.parents
        ga = gb = None
        if a.requires_grad:
            ga = reduce_to_shape(grad_out.div(b), a.shape)
        if b.requires_grad:
            gb = reduce_to_shape(grad_out.mul(a).div(b.mul(b)).neg(), b.shape)
        return ga, gb
