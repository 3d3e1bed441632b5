"""
Backend-agnostic contracts of the differentiation engine.

The domain layer holds shapes, operation kinds, errors and the protocols
implemented by the infrastructure layer. It never imports the
infrastructure.
"""

from ._size import Size, SizeLike, broadcast_shape, reduce_axes_for
from ._errors import GradientStateError, ShapeError
from ._operation import OperationKind
from ._strategy import GradientStrategy
from ._function import Function
from ._value import IValue
from ._backend import INumericBackend, INativeGradientBackend

__all__ = [
    "Size",
    "SizeLike",
    "broadcast_shape",
    "reduce_axes_for",
    "GradientStateError",
    "ShapeError",
    "OperationKind",
    "GradientStrategy",
    "Function",
    "IValue",
    "INumericBackend",
    "INativeGradientBackend",
]
