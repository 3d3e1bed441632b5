"""
Operations combining a Value with a Python scalar.

The scalar is stored in `ctx.saved_meta["scalar"]` and never receives a
gradient. Subtracting a scalar (`a - k`) is recorded as `SCALAR_ADD` with
`-k`.
"""

from ...domain._function import Function
from ...domain._operation import OperationKind
from .._settings import get_settings
from ._registry import register_operation

__all__ = ["ScalarAdd", "ScalarMul", "ScalarDiv", "ScalarRsub", "ScalarRdiv"]


@register_operation(OperationKind.SCALAR_ADD)
class ScalarAdd(Function):
    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.add(a, ctx.saved_meta["scalar"])

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out,)


@register_operation(OperationKind.SCALAR_MUL)
class ScalarMul(Function):
    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.mul(a, ctx.saved_meta["scalar"])

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.mul(ctx.saved_meta["scalar"]),)


@register_operation(OperationKind.SCALAR_DIV)
class ScalarDiv(Function):
    """a / k"""

    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.div(a, ctx.saved_meta["scalar"])

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.div(ctx.saved_meta["scalar"]),)


@register_operation(OperationKind.SCALAR_RSUB)
class ScalarRsub(Function):
    """k - a"""

    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.sub(ctx.saved_meta["scalar"], a)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.neg(),)


@register_operation(OperationKind.SCALAR_RDIV)
class ScalarRdiv(Function):
    """k / a, with d/da = -k / a^2"""

    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.div(ctx.saved_meta["scalar"], a)

    @staticmethod
    def backward(ctx, grad_out):
        (a,) = ctx.parents
        k = ctx.saved_meta["scalar"]
        return (grad_out.mul(k).div(a.mul(a)).neg(),)
