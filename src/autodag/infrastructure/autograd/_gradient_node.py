"""
Gradient nodes.

Every Value owns exactly one `GradNode`. Leaf nodes carry no operation;
operation nodes carry the `Context` of the operation that produced their
Value. `GradNode.apply` computes the per-parent gradients of the recorded
operation and is dispatched on `strategy` (see `_dispatch`).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from ...domain._errors import GradientStateError
from ...domain._operation import OperationKind
from ...domain._strategy import GradientStrategy
from ...domain._value import IValue
from .._settings import get_settings
from ._context import Context
from ._grad_mode import is_grad_enabled

logger = logging.getLogger(__name__)


class GradNode:
    """
    Node of the computation graph owned by a single Value.

    Parameters
    ----------
    context : Context, optional
        Operation record. `None` makes this a leaf node.
    disable_native_gradient : bool, optional
        Force the symbolic strategy for this node.

    Attributes
    ----------
    operation : OperationKind | None
        Recorded operation, `None` for leaves.
    disable_native_gradient : bool
        Settable flag; see `strategy`.
    released : bool
        True once a backward pass run without `keep_graph` consumed the node.
    """

    __slots__ = (
        "operation",
        "context",
        "disable_native_gradient",
        "released",
        "__weakref__",
    )

    def __init__(
        self,
        context: Optional[Context] = None,
        disable_native_gradient: bool = False,
    ) -> None:
        self.context = context
        self.operation: Optional[OperationKind] = (
            context.operation if context is not None else None
        )
        self.disable_native_gradient = bool(disable_native_gradient)
        self.released = False

    @property
    def is_leaf(self) -> bool:
        return self.operation is None

    @property
    def parents(self) -> Sequence[IValue]:
        return self.context.parents if self.context is not None else ()

    @property
    def strategy(self) -> GradientStrategy:
        """
        Resolve how `apply` computes gradients for this node.

        The node uses `SYMBOLIC` if native gradients are disabled for it, are
        disabled or not preferred in the settings, are not available for its
        operation, or if grad mode is enabled (graph retention needs
        replayable gradients). Otherwise it uses `NATIVE`.
        """
        settings = get_settings()
        native = settings.native_gradients
        if (
            self.disable_native_gradient
            or native is None
            or settings.default_strategy is GradientStrategy.SYMBOLIC
            or self.operation is None
            or not native.supports(self.operation)
        ):
            return GradientStrategy.SYMBOLIC
        if is_grad_enabled():
            logger.debug(
                "%s: native gradient unavailable while recording, using symbolic",
                self.operation,
            )
            return GradientStrategy.SYMBOLIC
        return GradientStrategy.NATIVE

    def apply(self, grad_out: IValue) -> Tuple[Optional[IValue], ...]:
        """
        Compute the gradients of the recorded operation's parents.

        Parameters
        ----------
        grad_out : IValue
            Gradient with respect to this node's Value.

        Returns
        -------
        tuple[IValue | None, ...]
            One entry per parent.

        Notes
        -----
        Replaced on the class by the strategy dispatcher once the native and
        symbolic paths are registered.
        """
        raise NotImplementedError

    def check_usable(self) -> None:
        """
        Raise if this node was released by an earlier backward pass.

        Raises
        ------
        GradientStateError
            If the node was released.
        """
        if self.released:
            raise GradientStateError(
                "backward",
                f"graph segment at '{self.operation}' was already released; "
                "run the earlier backward pass with keep_graph=True to "
                "backpropagate through it again",
            )

    def release(self) -> None:
        """Drop the operation record so its memory can be reclaimed."""
        if self.context is not None:
            self.context.release()
        self.context = None
        self.released = True

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf else str(self.operation)
        state = ", released" if self.released else ""
        return f"GradNode({kind}{state})"
