"""
Value interface definitions.

This module defines the domain-level interface for differentiable values
using structural typing. Backward rules, the engine and the registry are
written against `IValue` so they never import the concrete `Value` class.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class IValue(Protocol):
    """
    Differentiable value interface.

    An `IValue` wraps an n-dimensional array, owns exactly one gradient node,
    and exposes the arithmetic and shape operations backward rules are
    written with.

    Notes
    -----
    The protocol mirrors the surface the engine and the operation rules
    rely on; the concrete `Value` offers more (factories, `__getitem__`,
    operators).
    """

    # ---------------------------------------------------------------------
    # Payload and metadata
    # ---------------------------------------------------------------------
    @property
    def data(self) -> Any:
        """Underlying array payload."""
        ...

    @property
    def shape(self) -> Tuple[int, ...]:
        """Shape of the payload as a tuple."""
        ...

    def numel(self) -> int:
        """Number of elements."""
        ...

    # ---------------------------------------------------------------------
    # Autograd state
    # ---------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        """Whether gradients should be computed for this value."""
        ...

    @property
    def grad_node(self) -> Any:
        """The gradient node owned by this value."""
        ...

    @property
    def is_leaf(self) -> bool:
        """True if the value was not produced by a recorded operation."""
        ...

    def grad(self, reset_after_read: bool = False) -> Optional["IValue"]:
        """Read the accumulated gradient."""
        ...

    @property
    def is_native_gradient(self) -> bool:
        """True if produced by the native gradient backend."""
        ...

    @property
    def registry(self) -> Any:
        """Value-lifetime registry this value belongs to, if any."""
        ...

    # ---------------------------------------------------------------------
    # Operations used by backward rules
    # ---------------------------------------------------------------------
    def add(self, other: Union["IValue", Number]) -> "IValue": ...

    def sub(self, other: Union["IValue", Number]) -> "IValue": ...

    def mul(self, other: Union["IValue", Number]) -> "IValue": ...

    def div(self, other: Union["IValue", Number]) -> "IValue": ...

    def matmul(self, other: "IValue") -> "IValue": ...

    def neg(self) -> "IValue": ...

    def t(self) -> "IValue": ...

    def reshape(self, *size: Any) -> "IValue": ...

    def broadcast_to(self, size: Any) -> "IValue": ...

    def sum_to_shape(self, size: Any) -> "IValue": ...

    def scatter(self, key: Any, size: Any) -> "IValue": ...

    def clone(self) -> "IValue": ...
