"""
Matrix multiplication and last-two-axes transpose.

`MATMUL` follows NumPy `matmul` semantics for operands of rank >= 2: the
last two axes are multiplied and the leading (batch) axes broadcast.
Rank-1 operands are rejected.
"""

from ...domain._errors import ShapeError
from ...domain._function import Function
from ...domain._operation import OperationKind
from ...domain._size import Size
from .._settings import get_settings
from ..autograd._engine import reduce_to_shape
from ._registry import register_operation

__all__ = ["Matmul", "Transpose"]


def _check_matmul(a_shape, b_shape) -> None:
    shapes = (a_shape, b_shape)
    if len(a_shape) < 2 or len(b_shape) < 2:
        raise ShapeError("matmul", "operands must have at least 2 dimensions", shapes)
    if a_shape[-1] != b_shape[-2]:
        raise ShapeError(
            "matmul",
            f"inner dimensions differ ({a_shape[-1]} vs {b_shape[-2]})",
            shapes,
        )
    if not Size.of(a_shape[:-2]).is_broadcast_compatible(b_shape[:-2]):
        raise ShapeError("matmul", "batch dimensions do not broadcast", shapes)


@register_operation(OperationKind.MATMUL)
class Matmul(Function):
    """
    a @ b.

    Backward:
        dA = g @ b^T  (reduced to a.shape)
        dB = a^T @ g  (reduced to b.shape)
    """

    @staticmethod
    def forward(ctx, a, b):
        _check_matmul(a.shape, b.shape)
        return get_settings().backend.matmul(a, b)

    @staticmethod
    def backward(ctx, grad_out):
        a, b = ctx.parents
        ga = gb = None
        if a.requires_grad:
            ga = reduce_to_shape(grad_out.matmul(b.t()), a.shape)
        if b.requires_grad:
            gb = reduce_to_shape(a.t().matmul(grad_out), b.shape)
        return ga, gb


@register_operation(OperationKind.TRANSPOSE)
class Transpose(Function):
    @staticmethod
    def forward(ctx, a):
        if a.ndim < 2:
            raise ShapeError(
                "transpose", "value must have at least 2 dimensions", (a.shape,)
            )
        return get_settings().backend.transpose_last(a)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.t(),)
