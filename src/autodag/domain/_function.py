"""
Autograd function interface definitions.

This module defines the abstract base class for differentiable operations
used by the differentiation engine. Concrete subclasses of `Function`
implement both the forward computation and the symbolic backward rule
(vector-Jacobian product) of one `OperationKind`.

The design follows function-level autograd systems (e.g., PyTorch's
`autograd.Function`): functions are stateless, and everything a backward
rule needs is stored on the per-invocation context.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional, Tuple

from ._operation import OperationKind
from ._value import IValue


class Function(ABC):
    """
    Abstract base class for differentiable operations.

    A `Function` encapsulates:
    - the forward computation, producing the raw result array, and
    - the symbolic backward computation, producing one gradient Value per
      parent (or None for parents that receive no gradient).

    Subclasses must set `kind` and implement both `forward` and `backward`
    as static methods. Values needed by the backward rule are stored on the
    provided `ctx` during the forward pass (`ctx.save_for_backward`,
    `ctx.saved_meta`).

    Notes
    -----
    - Methods are declared as `@staticmethod` to avoid implicit state on the
      function object itself.
    - Backward rules are written with Value operations only. When the engine
      runs with graph recording enabled they therefore extend the graph, which
      is what makes higher-order differentiation possible.
    """

    kind: ClassVar[OperationKind]

    @staticmethod
    @abstractmethod
    def forward(ctx, *inputs: Any) -> Any:
        """
        Perform the forward computation.

        Parameters
        ----------
        ctx : Context
            Operation record used to save arrays and metadata for backward.
            `ctx.parents` holds the Value operands, `ctx.saved_meta` any
            non-Value arguments passed to `apply_operation`.
        *inputs : Any
            Raw operand arrays, in the order of `ctx.parents`.

        Returns
        -------
        numpy.ndarray
            The raw result array.
        """
        ...

    @staticmethod
    @abstractmethod
    def backward(ctx, grad_out: IValue) -> Tuple[Optional[IValue], ...]:
        """
        Compute gradients with respect to the parents.

        Parameters
        ----------
        ctx : Context
            The context populated during the forward pass.
        grad_out : IValue
            Gradient of the differentiated root with respect to the output.

        Returns
        -------
        tuple[IValue | None, ...]
            Exactly one entry per parent, each shaped like its parent.
        """
        ...
