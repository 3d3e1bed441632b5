"""
Concrete differentiable Value (NumPy payload).

A `Value` wraps an array and owns exactly one `GradNode`. Operations are
provided by the mixins and all go through `apply_operation`, which decides
whether the result records history.

Graph rules
-----------
- Values built directly (constructor, factories, `detach`) are leaves.
- A result requires grad iff grad mode is enabled and any operand requires
  grad; only such results own an operation node.
- Gradients accumulate into a per-Value slot read with `grad()`. Both
  leaves and intermediate Values reached by a backward pass keep their
  gradients.
"""

from __future__ import annotations

import weakref
from typing import Any, List, Optional, Tuple

import numpy as np

from ...domain._errors import GradientStateError
from ...domain._operation import OperationKind
from ...domain._size import Size, SizeLike
from ...domain._value import IValue
from .._settings import get_settings
from ..autograd._backward_config import BackwardConfig
from ..autograd._engine import run_backward
from ..autograd._gradient_node import GradNode
from ..autograd._registry import AutogradValueRegistry
from ..ops._registry import apply_operation
from .mixins import ValueMixinArithmetic, ValueMixinReduction, ValueMixinShape


class Value(ValueMixinArithmetic, ValueMixinShape, ValueMixinReduction, IValue):
    """
    Differentiable n-dimensional value.

    Parameters
    ----------
    data : array-like | Value
        Payload. Converted to `dtype` without copying when possible; a Value
        contributes its payload.
    requires_grad : bool, optional
        Whether gradients should be computed for this Value. Defaults to False.
    registry : AutogradValueRegistry, optional
        Scope to register this Value with.
    name : str, optional
        Debug label.
    dtype : numpy dtype, optional
        Element type. Defaults to the configured settings dtype (float32).

    Notes
    -----
    `__array_priority__` makes NumPy defer mixed operators (`ndarray + Value`)
    to the Value's reflected methods.
    """

    __array_priority__ = 1000

    def __init__(
        self,
        data: Any,
        requires_grad: bool = False,
        *,
        registry: Optional[AutogradValueRegistry] = None,
        name: Optional[str] = None,
        dtype: Any = None,
    ) -> None:
        if isinstance(data, Value):
            data = data._data
        settings = get_settings()
        self._data = settings.backend.asarray(
            data, dtype=dtype if dtype is not None else settings.dtype
        )

        self._grad_node = GradNode()
        self._requires_grad = bool(requires_grad)
        self._grad_slot: Optional["Value"] = None
        self._is_native_gradient = False
        self._consumers: List[weakref.ref] = []
        self._name = name
        self._registry = registry
        if registry is not None:
            registry.register(self)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(cls, size: SizeLike, requires_grad: bool = False, **kwargs: Any) -> "Value":
        settings = get_settings()
        shape = Size.of(size).dimensions()
        return cls(settings.backend.zeros(shape, settings.dtype), requires_grad, **kwargs)

    @classmethod
    def ones(cls, size: SizeLike, requires_grad: bool = False, **kwargs: Any) -> "Value":
        settings = get_settings()
        shape = Size.of(size).dimensions()
        return cls(settings.backend.ones(shape, settings.dtype), requires_grad, **kwargs)

    @classmethod
    def full(
        cls, size: SizeLike, fill: float, requires_grad: bool = False, **kwargs: Any
    ) -> "Value":
        settings = get_settings()
        shape = Size.of(size).dimensions()
        return cls(
            settings.backend.full(shape, float(fill), settings.dtype),
            requires_grad,
            **kwargs,
        )

    @classmethod
    def rand(cls, size: SizeLike, requires_grad: bool = False, **kwargs: Any) -> "Value":
        """Uniform random values in [0, 1), generated with NumPy."""
        shape = Size.of(size).dimensions()
        return cls(np.random.rand(*shape), requires_grad, **kwargs)

    @classmethod
    def randn(cls, size: SizeLike, requires_grad: bool = False, **kwargs: Any) -> "Value":
        """Standard-normal random values, generated with NumPy."""
        shape = Size.of(size).dimensions()
        return cls(np.random.randn(*shape), requires_grad, **kwargs)

    @classmethod
    def scalar(cls, x: float, requires_grad: bool = False, **kwargs: Any) -> "Value":
        """0-d Value holding `x`."""
        return cls(float(x), requires_grad, **kwargs)

    # ------------------------------------------------------------------
    # Payload and metadata
    # ------------------------------------------------------------------
    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def ndim(self) -> int:
        return self._data.ndim

    def size(self) -> Size:
        return Size(self._data.shape)

    def numel(self) -> int:
        return int(self._data.size)

    def item(self) -> float:
        """
        Return the single element as a Python float.

        Raises
        ------
        ValueError
            If the Value holds more than one element.
        """
        if self.numel() != 1:
            raise ValueError(f"item() requires a single element, got shape {self.shape}")
        return float(self._data.reshape(()))

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the payload."""
        return np.array(self._data, copy=True)

    @property
    def name(self) -> Optional[str]:
        return self._name

    def name_(self, label: str) -> "Value":
        """Set the debug label and return self."""
        self._name = label
        return self

    @property
    def registry(self) -> Optional[AutogradValueRegistry]:
        return self._registry

    def _set_shape(self, shape: Tuple[int, ...]) -> None:
        backend = get_settings().backend
        view = backend.view(self._data, shape)
        self._data = view if view is not None else backend.reshape(self._data, shape)

    # ------------------------------------------------------------------
    # Autograd state
    # ------------------------------------------------------------------
    @property
    def grad_node(self) -> GradNode:
        return self._grad_node

    @property
    def is_leaf(self) -> bool:
        return self._grad_node.is_leaf

    @property
    def is_native_gradient(self) -> bool:
        """True if this Value was produced by the native gradient backend."""
        return self._is_native_gradient

    @property
    def requires_grad(self) -> bool:
        return self._requires_grad

    @requires_grad.setter
    def requires_grad(self, flag: bool) -> None:
        self.requires_grad_(flag)

    def requires_grad_(self, flag: bool = True) -> "Value":
        """
        Set `requires_grad` in place and return self.

        Raises
        ------
        GradientStateError
            If this is not a leaf Value and the flag would change.
        """
        flag = bool(flag)
        if not self.is_leaf and flag != self._requires_grad:
            raise GradientStateError(
                "requires_grad_",
                "requires_grad can only be changed on leaf values",
            )
        self._requires_grad = flag
        return self

    def grad(self, reset_after_read: bool = False) -> Optional["Value"]:
        """
        Return the accumulated gradient, or None if none was computed.

        Parameters
        ----------
        reset_after_read : bool, optional
            Clear the gradient slot after reading it. Defaults to False.
        """
        g = self._grad_slot
        if reset_after_read:
            self._grad_slot = None
        return g

    def zero_grad(self) -> None:
        """Clear the gradient slot."""
        self._grad_slot = None

    def backward(
        self, grad_output: Any = None, config: Optional[BackwardConfig] = None
    ) -> None:
        """
        Backpropagate from this Value.

        Parameters
        ----------
        grad_output : Value | array-like | Number, optional
            Seed gradient shaped like this Value. Required unless the Value
            holds exactly one element. A `BackwardConfig` passed here is
            treated as `config`.
        config : BackwardConfig, optional
            Pass options (e.g. `BackwardConfig().with_keep_graph(True)`).
        """
        if isinstance(grad_output, BackwardConfig) and config is None:
            grad_output, config = None, grad_output
        run_backward(self, grad_output, config)

    def detach(self) -> "Value":
        """Return a leaf Value sharing this payload."""
        return type(self)(self._data, dtype=self._data.dtype, registry=self._registry)

    def clone(self) -> IValue:
        """Return a copy of this Value, recorded as `CLONE`."""
        return apply_operation(OperationKind.CLONE, self)

    def _attach_grad_node(self, node: GradNode) -> None:
        self._grad_node = node
        self._requires_grad = True

    def _mark_native_gradient(self) -> None:
        self._is_native_gradient = True

    def _add_consumer(self, node: GradNode) -> None:
        self._consumers.append(weakref.ref(node))

    def _has_pending_consumers(self) -> bool:
        """True if a recorded operation that still awaits backward used this Value."""
        nodes = [r() for r in self._consumers]
        self._consumers = [r for r, n in zip(self._consumers, nodes) if n is not None]
        return any(n is not None and not n.released for n in nodes)

    def __len__(self) -> int:
        if not self.shape:
            raise TypeError("len() of a 0-d Value")
        return self.shape[0]

    def __repr__(self) -> str:
        label = f", name={self._name!r}" if self._name else ""
        grad = ", requires_grad=True" if self._requires_grad else ""
        return f"Value(shape={self.shape}, dtype={self.dtype}{grad}{label})"
