"""
Gradient computation strategies.

A gradient node computes the vector-Jacobian product of its operation in one
of two ways:

- `NATIVE`: delegate to an opaque backend routine operating on raw arrays.
  Fast, but produces plain arrays with no recorded history, so the result
  cannot be differentiated again.
- `SYMBOLIC`: replay the operation's backward rule expressed with Value
  operations. When graph recording is enabled during backward, the produced
  gradients are themselves differentiable.
"""

from enum import Enum


class GradientStrategy(Enum):
    """
    Enumeration of gradient computation strategies.

    Attributes
    ----------
    NATIVE : GradientStrategy
        Backend-delegated vector-Jacobian product (non-replayable).
    SYMBOLIC : GradientStrategy
        Per-operation backward rule built from Value operations (replayable).
    """

    NATIVE = "native"
    SYMBOLIC = "symbolic"

    @classmethod
    def parse(cls, text: str) -> "GradientStrategy":
        """
        Parse a strategy from its (case-insensitive) name.

        Raises
        ------
        ValueError
            If `text` names no strategy.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid gradient strategy {text!r}. Expected 'native' or 'symbolic'"
            ) from None
