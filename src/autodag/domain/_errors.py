"""
Graph-, shape- and registry-related exceptions for autodag.

This module defines the custom errors raised by the differentiation engine.
They are split into two families:

- `GradientStateError` signals that an operation is invalid given the current
  state of the computation graph (nothing to differentiate, a graph segment
  that was already consumed, a closed value registry, ...).
- `ShapeError` signals that operand shapes are incompatible with the
  requested operation (broadcast conflicts, element-count mismatches for
  reshaping, out-of-bounds slicing, ...).

Errors raised by the numeric backend itself (NumPy) are never wrapped; they
propagate to the caller unchanged.
"""

from typing import Optional, Sequence


class GradientStateError(RuntimeError):
    """
    Raised when a gradient operation is invalid for the current graph state.

    Typical causes:
    - calling `backward` on a Value whose `requires_grad` is False,
    - calling `backward` a second time through a graph segment that was
      released by a previous pass run without `keep_graph`,
    - toggling `requires_grad` on a non-leaf Value,
    - registering a Value with a registry that was already closed.

    Attributes
    ----------
    op : str
        Name of the operation that detected the invalid state.
    """

    def __init__(self, op: str, message: str) -> None:
        """
        Initialize the GradientStateError.

        Parameters
        ----------
        op : str
            Operation name (e.g., "backward", "requires_grad_").
        message : str
            Human-readable description of the invalid state.
        """
        super().__init__(f"{op}: {message}")
        self.op = op


class ShapeError(ValueError):
    """
    Raised when shapes are incompatible with the requested operation.

    Attributes
    ----------
    op : str
        Name of the operation that rejected the shapes.
    shapes : tuple[tuple[int, ...], ...]
        The offending shapes, in operand order.
    """

    def __init__(
        self,
        op: str,
        message: str,
        shapes: Optional[Sequence[Sequence[int]]] = None,
    ) -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        op : str
            Operation name (e.g., "add", "view", "slice").
        message : str
            Human-readable description of the mismatch.
        shapes : Sequence[Sequence[int]], optional
            Shapes involved in the failed operation.
        """
        super().__init__(f"{op}: {message}")
        self.op = op
        self.shapes = tuple(tuple(int(d) for d in s) for s in (shapes or ()))
