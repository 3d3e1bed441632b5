"""
Native (backend-delegated) vector-Jacobian products for NumPy.

Each rule maps a recorded operation and a raw output gradient directly to
raw per-parent gradient arrays. No Value is created and nothing is
recorded, so these gradients are not differentiable again.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from ...domain._operation import OperationKind
from ._numpy_backend import NumpyBackend

_np = NumpyBackend()

Grads = Tuple[Optional[np.ndarray], ...]
VjpRule = Callable[[Any, np.ndarray], Grads]


def _data(ctx: Any, i: int) -> np.ndarray:
    return ctx.parents[i].data


def _sum_to(g: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
    if g.shape == tuple(shape):
        return g
    return _np.sum_to_shape(g, tuple(shape))


def _vjp_add(ctx, g):
    a, b = _data(ctx, 0), _data(ctx, 1)
    return _sum_to(g, a.shape), _sum_to(g, b.shape)


def _vjp_sub(ctx, g):
    a, b = _data(ctx, 0), _data(ctx, 1)
    return _sum_to(g, a.shape), _sum_to(-g, b.shape)


def _vjp_mul(ctx, g):
    a, b = _data(ctx, 0), _data(ctx, 1)
    return _sum_to(g * b, a.shape), _sum_to(g * a, b.shape)


def _vjp_div(ctx, g):
    a, b = _data(ctx, 0), _data(ctx, 1)
    return _sum_to(g / b, a.shape), _sum_to(-(g * a) / (b * b), b.shape)


def _vjp_matmul(ctx, g):
    a, b = _data(ctx, 0), _data(ctx, 1)
    ga = np.matmul(g, np.swapaxes(b, -1, -2))
    gb = np.matmul(np.swapaxes(a, -1, -2), g)
    return _sum_to(ga, a.shape), _sum_to(gb, b.shape)


def _vjp_transpose(ctx, g):
    return (_np.transpose_last(g),)


def _vjp_relu(ctx, g):
    (mask,) = ctx.saved_arrays
    return (g * mask,)


def _vjp_sum(ctx, g):
    return (_np.broadcast_to(g, ctx.saved_meta["src_shape"]),)


def _vjp_reshape(ctx, g):
    return (np.array(np.reshape(g, ctx.saved_meta["src_shape"]), copy=True),)


def _vjp_slice(ctx, g):
    meta = ctx.saved_meta
    return (_np.scatter(g, meta["key"], meta["src_shape"]),)


def _vjp_scatter(ctx, g):
    return (_np.slice(g, ctx.saved_meta["key"]),)


def _vjp_broadcast_to(ctx, g):
    return (_sum_to(g, ctx.saved_meta["src_shape"]),)


def _vjp_sum_to_shape(ctx, g):
    return (_np.broadcast_to(g, ctx.saved_meta["src_shape"]),)


def _vjp_neg(ctx, g):
    return (-g,)


def _vjp_clone(ctx, g):
    return (np.array(g, copy=True),)


def _vjp_scalar_add(ctx, g):
    return (np.array(g, copy=True),)


def _vjp_scalar_mul(ctx, g):
    return (g * ctx.saved_meta["scalar"],)


def _vjp_scalar_div(ctx, g):
    return (g / ctx.saved_meta["scalar"],)


def _vjp_scalar_rsub(ctx, g):
    return (-g,)


def _vjp_scalar_rdiv(ctx, g):
    a = _data(ctx, 0)
    return (-(g * ctx.saved_meta["scalar"]) / (a * a),)


_RULES: Dict[OperationKind, VjpRule] = {
    OperationKind.ADD: _vjp_add,
    OperationKind.SUB: _vjp_sub,
    OperationKind.MUL: _vjp_mul,
    OperationKind.DIV: _vjp_div,
    OperationKind.MATMUL: _vjp_matmul,
    OperationKind.TRANSPOSE: _vjp_transpose,
    OperationKind.RELU: _vjp_relu,
    OperationKind.SUM: _vjp_sum,
    OperationKind.RESHAPE: _vjp_reshape,
    OperationKind.VIEW: _vjp_reshape,
    OperationKind.SLICE: _vjp_slice,
    OperationKind.SCATTER: _vjp_scatter,
    OperationKind.BROADCAST_TO: _vjp_broadcast_to,
    OperationKind.SUM_TO_SHAPE: _vjp_sum_to_shape,
    OperationKind.NEG: _vjp_neg,
    OperationKind.CLONE: _vjp_clone,
    OperationKind.SCALAR_ADD: _vjp_scalar_add,
    OperationKind.SCALAR_MUL: _vjp_scalar_mul,
    OperationKind.SCALAR_DIV: _vjp_scalar_div,
    OperationKind.SCALAR_RSUB: _vjp_scalar_rsub,
    OperationKind.SCALAR_RDIV: _vjp_scalar_rdiv,
}


class NumpyNativeGradients:
    """
    Native gradient backend computing VJPs directly on NumPy arrays.

    Parameters
    ----------
    unsupported : Iterable[OperationKind], optional
        Operation kinds to report as unsupported, forcing the symbolic path
        for them.
    """

    def __init__(self, unsupported: Sequence[OperationKind] = ()) -> None:
        self._unsupported = frozenset(unsupported)

    def supports(self, kind: OperationKind) -> bool:
        return kind in _RULES and kind not in self._unsupported

    def vjp(self, kind: OperationKind, ctx: Any, grad_out: np.ndarray) -> Grads:
        if not self.supports(kind):
            raise NotImplementedError(f"No native gradient for operation {kind}")
        return _RULES[kind](ctx, grad_out)
