"""
Shape and indexing mixin for Value.

Size arguments may be given as separate ints (`reshape(2, 3)`), a single
tuple, or a `Size` (`reshape(Size(2, 3))`). `reshape` and `view` accept one
`-1` dimension.
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Sequence, Tuple

from ....domain._errors import GradientStateError
from ....domain._operation import OperationKind
from ....domain._size import Size
from ....domain._value import IValue
from ...ops._registry import apply_operation
from ...ops._shape import resolve_shape
from ...ops._slice import index_key, span_key


def _size_args(size: Sequence[Any]) -> Tuple[int, ...]:
    if len(size) == 1 and not hasattr(size[0], "__index__"):
        (size,) = size
        if isinstance(size, Size):
            return size.dimensions()
    return tuple(int(d) for d in size)


class ValueMixinShape(ABC):
    """Reshaping, in-place resizing, slicing and scattering."""

    def reshape(self, *size: Any) -> IValue:
        """
        Return a Value with the same elements and a new shape.

        The result shares memory with this Value when the layout allows it.

        Raises
        ------
        ShapeError
            If the element counts differ.
        """
        return apply_operation(OperationKind.RESHAPE, self, shape=_size_args(size))

    def view(self, *size: Any) -> IValue:
        """
        Return a view with a new shape, never copying.

        Raises
        ------
        ShapeError
            If the element counts differ or the memory layout cannot be
            viewed with the new shape.
        """
        return apply_operation(OperationKind.VIEW, self, shape=_size_args(size))

    def resize_(self, *size: Any) -> IValue:
        """
        Change the shape of this Value in place and return it.

        The element count is preserved. An existing gradient slot is resized
        along with the payload; a slot recorded by a `keep_graph` pass is
        first replaced by an unrecorded Value sharing its data, leaving that
        graph untouched.

        Raises
        ------
        GradientStateError
            If this is a non-leaf Value that requires grad, or if a recorded
            operation that has not yet been consumed by a backward pass used
            this Value (its gradient rule depends on the current shape).
        ShapeError
            If the element counts differ.
        """
        if self.requires_grad and not self.is_leaf:
            raise GradientStateError(
                "resize_", "cannot resize a non-leaf value that requires grad"
            )
        if self._has_pending_consumers():
            raise GradientStateError(
                "resize_",
                "cannot resize a value used by a recorded operation that has "
                "not been backpropagated yet",
            )
        shape = resolve_shape("resize_", _size_args(size), self.numel())
        self._set_shape(shape)
        slot = self._grad_slot
        if slot is not None:
            if not slot.is_leaf:
                native = slot.is_native_gradient
                slot = type(slot)(slot.data, dtype=slot.dtype)
                if native:
                    slot._mark_native_gradient()
                self._grad_slot = slot
            slot._set_shape(shape)
        return self

    def get_tensor(self, *args: Any) -> IValue:
        """
        Select a sub-region.

        Two forms are supported:

        - `get_tensor(starts, lengths)`: per-axis start offsets and lengths.
          A length of `-1` selects index `start` and drops the axis.
          The second sequence holds lengths, not end indices:
          `get_tensor((0, 1), (1, 2))` on a 2x3 Value selects `[0:1, 1:3]`,
          while `get_tensor((0, 1), (1, 3))` overruns axis 1 and raises.
        - `get_tensor(i0, i1, ...)`: one int per leading axis; `-1` keeps the
          whole axis and `k >= 0` selects index `k`, dropping the axis.

        Axes not covered by the arguments are kept whole.

        Raises
        ------
        ShapeError
            If a span or index is out of bounds.
        """
        if len(args) == 2 and not any(hasattr(a, "__index__") for a in args):
            key = span_key(args[0], args[1], self.shape)
        else:
            key = index_key(args, self.shape)
        return apply_operation(OperationKind.SLICE, self, key=key)

    def __getitem__(self, key: Any) -> IValue:
        """Basic indexing with ints and step-1 slices."""
        return apply_operation(OperationKind.SLICE, self, key=key)

    def scatter(self, key: Any, size: Any) -> IValue:
        """
        Place this Value at `key` inside zeros of shape `size`.

        The adjoint of `self[key]`.
        """
        shape = Size.of(size).dimensions()
        return apply_operation(OperationKind.SCATTER, self, key=key, shape=shape)
