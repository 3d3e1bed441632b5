"""
NumPy implementation of the numeric backend.

`NumpyBackend` provides every kernel the operation rules call. Results are
fresh arrays unless the operation is documented as a view (`view`, and
`reshape` when the layout allows it).
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np

from ...domain._size import reduce_axes_for


class NumpyBackend:
    """
    CPU kernels backed by NumPy.

    Notes
    -----
    - Python scalars combined with arrays keep the array dtype.
    - Errors raised by NumPy are not wrapped.
    """

    name = "numpy"

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def asarray(self, data: Any, dtype: Any = None) -> np.ndarray:
        return np.asarray(data, dtype=dtype)

    def zeros(self, shape: Tuple[int, ...], dtype: Any) -> np.ndarray:
        return np.zeros(shape, dtype=dtype)

    def ones(self, shape: Tuple[int, ...], dtype: Any) -> np.ndarray:
        return np.ones(shape, dtype=dtype)

    def full(self, shape: Tuple[int, ...], fill: float, dtype: Any) -> np.ndarray:
        return np.full(shape, fill, dtype=dtype)

    def clone(self, a: np.ndarray) -> np.ndarray:
        return np.array(a, copy=True)

    # ------------------------------------------------------------------
    # Elementwise
    # ------------------------------------------------------------------
    def add(self, a: Any, b: Any) -> np.ndarray:
        return np.add(a, b)

    def sub(self, a: Any, b: Any) -> np.ndarray:
        return np.subtract(a, b)

    def mul(self, a: Any, b: Any) -> np.ndarray:
        return np.multiply(a, b)

    def div(self, a: Any, b: Any) -> np.ndarray:
        return np.true_divide(a, b)

    def neg(self, a: np.ndarray) -> np.ndarray:
        return np.negative(a)

    def relu(self, a: np.ndarray) -> np.ndarray:
        return np.maximum(a, 0).astype(a.dtype, copy=False)

    def relu_mask(self, a: np.ndarray) -> np.ndarray:
        return (a > 0).astype(a.dtype)

    def add_(self, dst: np.ndarray, src: np.ndarray) -> np.ndarray:
        """Add `src` into `dst` in place and return `dst`."""
        np.add(dst, src, out=dst)
        return dst

    # ------------------------------------------------------------------
    # Linear algebra
    # ------------------------------------------------------------------
    def matmul(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return np.matmul(a, b)

    def transpose_last(self, a: np.ndarray) -> np.ndarray:
        return np.ascontiguousarray(np.swapaxes(a, -1, -2))

    # ------------------------------------------------------------------
    # Reductions and broadcasting
    # ------------------------------------------------------------------
    def sum_all(self, a: np.ndarray) -> np.ndarray:
        return np.asarray(a.sum(), dtype=a.dtype)

    def broadcast_to(self, a: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
        return np.array(np.broadcast_to(a, shape), copy=True)

    def sum_to_shape(self, a: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
        """Sum `a` over broadcast axes so the result has exactly `shape`."""
        reduce_axes, _ = reduce_axes_for(a.shape, shape)
        out = a.sum(axis=reduce_axes, keepdims=True) if reduce_axes else a
        return np.array(out.reshape(shape), dtype=a.dtype, copy=True)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------
    def reshape(self, a: np.ndarray, shape: Tuple[int, ...]) -> np.ndarray:
        return np.reshape(a, shape)

    def view(self, a: np.ndarray, shape: Tuple[int, ...]) -> Optional[np.ndarray]:
        """
        Return a view of `a` with `shape`, or None if that needs a copy.

        The caller validates the element count beforehand.
        """
        out = np.reshape(a, shape)
        if a.size and not np.may_share_memory(out, a):
            return None
        return out

    def slice(self, a: np.ndarray, key: Tuple[Any, ...]) -> np.ndarray:
        return np.array(a[key], copy=True)

    def scatter(
        self, a: np.ndarray, key: Tuple[Any, ...], shape: Tuple[int, ...]
    ) -> np.ndarray:
        """Place `a` at `key` inside a zero array of `shape`."""
        out = np.zeros(shape, dtype=a.dtype)
        out[key] = a
        return out
