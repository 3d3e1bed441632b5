"""
Arithmetic mixin for Value.

Binary operations accept another Value (broadcasting), a Python/NumPy real
number (recorded as a `SCALAR_*` operation with the number as metadata), or
a NumPy array (lifted to a constant Value that does not require grad).
"""

from __future__ import annotations

from abc import ABC
from numbers import Real
from typing import Any, Union

import numpy as np

from ....domain._operation import OperationKind
from ....domain._value import IValue
from ...ops._registry import apply_operation

Number = Union[int, float]
Operand = Union[IValue, Number, np.ndarray]


class ValueMixinArithmetic(ABC):
    """
    Elementwise arithmetic, matrix multiplication and their operators.

    Notes
    -----
    - `a - k` is recorded as `SCALAR_ADD` with `-k`.
    - Reflected operators with a scalar on the left record `SCALAR_RSUB` and
      `SCALAR_RDIV`; addition and multiplication are commutative and reuse
      the forward kinds.
    """

    def _lift(self, other: Any) -> Any:
        """Return `other` as a Value or a float scalar; raise TypeError otherwise."""
        if isinstance(other, type(self)):
            return other
        if isinstance(other, IValue):
            return other
        if isinstance(other, (bool, np.bool_)):
            raise TypeError(f"Unsupported operand type: {type(other).__name__}")
        if isinstance(other, Real):
            return float(other)
        if isinstance(other, np.ndarray):
            return type(self)(other, registry=self.registry)
        raise TypeError(f"Unsupported operand type: {type(other).__name__}")

    def add(self, other: Operand) -> IValue:
        """Elementwise `self + other`."""
        other = self._lift(other)
        if isinstance(other, float):
            return apply_operation(OperationKind.SCALAR_ADD, self, scalar=other)
        return apply_operation(OperationKind.ADD, self, other)

    def sub(self, other: Operand) -> IValue:
        """Elementwise `self - other`."""
        other = self._lift(other)
        if isinstance(other, float):
            return apply_operation(OperationKind.SCALAR_ADD, self, scalar=-other)
        return apply_operation(OperationKind.SUB, self, other)

    def mul(self, other: Operand) -> IValue:
        """Elementwise `self * other`."""
        other = self._lift(other)
        if isinstance(other, float):
            return apply_operation(OperationKind.SCALAR_MUL, self, scalar=other)
        return apply_operation(OperationKind.MUL, self, other)

    def div(self, other: Operand) -> IValue:
        """Elementwise `self / other`."""
        other = self._lift(other)
        if isinstance(other, float):
            return apply_operation(OperationKind.SCALAR_DIV, self, scalar=other)
        return apply_operation(OperationKind.DIV, self, other)

    def neg(self) -> IValue:
        return apply_operation(OperationKind.NEG, self)

    def relu(self) -> IValue:
        return apply_operation(OperationKind.RELU, self)

    def matmul(self, other: IValue) -> IValue:
        """
        Matrix product over the last two axes with broadcast batch axes.

        Raises
        ------
        ShapeError
            If either operand has fewer than 2 dimensions, the inner
            dimensions differ, or the batch dimensions do not broadcast.
        """
        other = self._lift(other)
        if isinstance(other, float):
            raise TypeError("matmul requires a Value or array operand, got a scalar")
        return apply_operation(OperationKind.MATMUL, self, other)

    def t(self) -> IValue:
        """Swap the last two axes."""
        return apply_operation(OperationKind.TRANSPOSE, self)

    @property
    def T(self) -> IValue:
        return self.t()

    # ----------------------------
    # Operators
    # ----------------------------
    def __add__(self, other: Operand) -> IValue:
        return self.add(other)

    def __radd__(self, other: Operand) -> IValue:
        lifted = self._lift(other)
        if isinstance(lifted, float):
            return self.add(lifted)
        return lifted.add(self)

    def __sub__(self, other: Operand) -> IValue:
        return self.sub(other)

    def __rsub__(self, other: Operand) -> IValue:
        lifted = self._lift(other)
        if isinstance(lifted, float):
            return apply_operation(OperationKind.SCALAR_RSUB, self, scalar=lifted)
        return lifted.sub(self)

    def __mul__(self, other: Operand) -> IValue:
        return self.mul(other)

    def __rmul__(self, other: Operand) -> IValue:
        lifted = self._lift(other)
        if isinstance(lifted, float):
            return self.mul(lifted)
        return lifted.mul(self)

    def __truediv__(self, other: Operand) -> IValue:
        return self.div(other)

    def __rtruediv__(self, other: Operand) -> IValue:
        lifted = self._lift(other)
        if isinstance(lifted, float):
            return apply_operation(OperationKind.SCALAR_RDIV, self, scalar=lifted)
        return lifted.div(self)

    def __matmul__(self, other: IValue) -> IValue:
        return self.matmul(other)

    def __rmatmul__(self, other: np.ndarray) -> IValue:
        lifted = self._lift(other)
        if isinstance(lifted, float):
            raise TypeError("matmul requires a Value or array operand, got a scalar")
        return lifted.matmul(self)

    def __neg__(self) -> IValue:
        return self.neg()
