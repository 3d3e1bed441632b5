"""
Numeric backend interfaces.

The engine never calls NumPy directly for operation kernels; it goes through
an `INumericBackend` held by the active settings. Native gradients go
through an `INativeGradientBackend`. Both are structural protocols so an
alternative implementation only has to provide the same methods.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ._operation import OperationKind

ArrayLike = Any
"""Opaque array type produced and consumed by a backend."""


@runtime_checkable
class INumericBackend(Protocol):
    """
    Kernel provider for Value operations.

    All methods take and return raw arrays. Shape validation that the engine
    needs (broadcasting, viewability, slice bounds) is performed before the
    call; errors raised by the backend itself propagate unchanged.
    """

    def asarray(self, data: Any, dtype: Any = None) -> ArrayLike: ...

    def zeros(self, shape: Tuple[int, ...], dtype: Any) -> ArrayLike: ...

    def ones(self, shape: Tuple[int, ...], dtype: Any) -> ArrayLike: ...

    def full(self, shape: Tuple[int, ...], fill: float, dtype: Any) -> ArrayLike: ...

    def add(self, a: ArrayLike, b: ArrayLike) -> ArrayLike: ...

    def sub(self, a: ArrayLike, b: ArrayLike) -> ArrayLike: ...

    def mul(self, a: ArrayLike, b: ArrayLike) -> ArrayLike: ...

    def div(self, a: ArrayLike, b: ArrayLike) -> ArrayLike: ...

    def neg(self, a: ArrayLike) -> ArrayLike: ...

    def matmul(self, a: ArrayLike, b: ArrayLike) -> ArrayLike: ...

    def transpose_last(self, a: ArrayLike) -> ArrayLike: ...

    def relu(self, a: ArrayLike) -> ArrayLike: ...

    def relu_mask(self, a: ArrayLike) -> ArrayLike: ...

    def sum_all(self, a: ArrayLike) -> ArrayLike: ...

    def broadcast_to(self, a: ArrayLike, shape: Tuple[int, ...]) -> ArrayLike: ...

    def sum_to_shape(self, a: ArrayLike, shape: Tuple[int, ...]) -> ArrayLike: ...

    def reshape(self, a: ArrayLike, shape: Tuple[int, ...]) -> ArrayLike: ...

    def view(self, a: ArrayLike, shape: Tuple[int, ...]) -> Optional[ArrayLike]: ...

    def slice(self, a: ArrayLike, key: Tuple[Any, ...]) -> ArrayLike: ...

    def scatter(
        self, a: ArrayLike, key: Tuple[Any, ...], shape: Tuple[int, ...]
    ) -> ArrayLike: ...

    def clone(self, a: ArrayLike) -> ArrayLike: ...

    def add_(self, dst: ArrayLike, src: ArrayLike) -> ArrayLike: ...


@runtime_checkable
class INativeGradientBackend(Protocol):
    """
    Opaque vector-Jacobian product provider.

    Native gradients are computed on raw arrays and carry no history, so they
    can never be differentiated again.
    """

    def supports(self, kind: OperationKind) -> bool:
        """Return True if a native VJP exists for `kind`."""
        ...

    def vjp(
        self, kind: OperationKind, ctx: Any, grad_out: ArrayLike
    ) -> Sequence[Optional[ArrayLike]]:
        """
        Compute per-parent gradients for one recorded operation.

        Parameters
        ----------
        kind : OperationKind
            The recorded operation.
        ctx : Context
            The operation record (parents, saved arrays, metadata).
        grad_out : array
            Raw gradient with respect to the operation's output.
        """
        ...
