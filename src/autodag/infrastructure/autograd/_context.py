from typing import Any, Callable, Optional, Sequence
from dataclasses import dataclass, field

from ...domain._operation import OperationKind
from ...domain._value import IValue


@dataclass
class Context:
    """
    Operation record attached to the gradient node of an operation result.

    A `Context` stores everything the backward rule of one recorded
    operation needs.

    Attributes
    ----------
    parents : Sequence[IValue]
        Operand Values, in operand order. Gradients are produced for these.
    operation : OperationKind
        The recorded operation.
    backward_fn : Callable[[Context, IValue], Sequence[Optional[IValue]]]
        Symbolic backward rule of the operation (its `Function.backward`).
    saved_arrays : list
        Raw arrays saved during forward (e.g. activation masks).
    saved_meta : dict[str, Any]
        Non-array metadata (shapes, slicing keys, scalar operands).
    """

    parents: Sequence[IValue]
    operation: OperationKind
    backward_fn: Callable[["Context", IValue], Sequence[Optional[IValue]]]
    saved_arrays: list = field(default_factory=list)
    saved_meta: dict[str, Any] = field(default_factory=dict)

    def save_for_backward(self, *arrays: Any) -> None:
        """
        Save raw arrays for use during the backward computation.

        Parameters
        ----------
        *arrays : array
            Any number of arrays appended to `saved_arrays`.
        """
        self.saved_arrays.extend(arrays)

    def release(self) -> None:
        """Drop references to parents and saved data."""
        self.parents = ()
        self.saved_arrays.clear()
        self.saved_meta.clear()
