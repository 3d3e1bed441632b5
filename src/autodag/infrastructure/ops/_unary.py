from ...domain._function import Function
from ...domain._operation import OperationKind
from .._settings import get_settings
from ._registry import register_operation

__all__ = ["Neg", "Clone", "Relu"]


@register_operation(OperationKind.NEG)
class Neg(Function):
    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.neg(a)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out.neg(),)


@register_operation(OperationKind.CLONE)
class Clone(Function):
    @staticmethod
    def forward(ctx, a):
        return get_settings().backend.clone(a)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out,)


@register_operation(OperationKind.RELU)
class Relu(Function):
    """
    Rectified linear unit, max(a, 0).

    The forward pass saves the mask `a > 0` (in the input dtype); the
    backward rule multiplies the incoming gradient by it.
    """

    @staticmethod
    def forward(ctx, a):
        backend = get_settings().backend
        ctx.save_for_backward(backend.relu_mask(a))
        return backend.relu(a)

    @staticmethod
    def backward(ctx, grad_out):
        (mask,) = ctx.saved_arrays
        return (grad_out.mul(type(grad_out)(mask)),)
