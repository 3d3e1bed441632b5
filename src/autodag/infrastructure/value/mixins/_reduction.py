from __future__ import annotations

from abc import ABC

from ....domain._operation import OperationKind
from ....domain._size import Size, SizeLike
from ....domain._value import IValue
from ...ops._registry import apply_operation


class ValueMixinReduction(ABC):
    """Reductions and (inverse) broadcasting."""

    def sum(self) -> IValue:
        """Sum all elements into a 0-d Value."""
        return apply_operation(OperationKind.SUM, self)

    def broadcast_to(self, size: SizeLike) -> IValue:
        """
        Broadcast to `size` following trailing-dimension alignment.

        Raises
        ------
        ShapeError
            If this shape cannot be broadcast to `size`.
        """
        return apply_operation(
            OperationKind.BROADCAST_TO, self, shape=Size.of(size).dimensions()
        )

    def sum_to_shape(self, size: SizeLike) -> IValue:
        """
        Sum over broadcast dimensions so the result has shape `size`.

        Raises
        ------
        ShapeError
            If `size` could not have been broadcast to this shape.
        """
        return apply_operation(
            OperationKind.SUM_TO_SHAPE, self, shape=Size.of(size).dimensions()
        )
