"""
Explicit value-lifetime scopes.

An `AutogradValueRegistry` tracks the Values created within a scope so they
can be inspected and found by name while the scope is open. It holds weak
references only and never keeps a Value alive.

Not thread-safe: use one registry per thread.

Values created by the backward engine (seeds, gradients and the operations
of symbolic backward rules) are never registered, so closing a scope does
not affect differentiation.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from ...domain._errors import GradientStateError
from ...domain._value import IValue

logger = logging.getLogger(__name__)

_suspended = threading.local()


def registration_suspended() -> bool:
    """Return True while operation results on this thread skip registration."""
    return getattr(_suspended, "active", False)


@contextmanager
def suspend_registration() -> Iterator[None]:
    """Create operation results without a registry for the duration of the block."""
    previous = registration_suspended()
    _suspended.active = True
    try:
        yield
    finally:
        _suspended.active = previous


class AutogradValueRegistry:
    """
    Weak registry of the Values created within a scope.

    Values join through the `registry=` argument of the Value constructor;
    results of operations join the registry of their first operand.

    Examples
    --------
    >>> with AutogradValueRegistry.create("step") as reg:
    ...     x = Value([1.0, 2.0], requires_grad=True, registry=reg)
    ...     y = x * 2
    ...     len(reg)
    2
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._refs: List[weakref.ref] = []
        self._created_count = 0
        self._closed = False

    @classmethod
    def create(cls, name: str) -> "AutogradValueRegistry":
        """Create an open registry labelled `name`."""
        registry = cls(name)
        logger.debug("registry %r created", name)
        return registry

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def created_count(self) -> int:
        """Number of Values ever registered, including collected ones."""
        return self._created_count

    def register(self, value: IValue) -> None:
        """
        Track `value`.

        Raises
        ------
        GradientStateError
            If the registry was closed.
        """
        if self._closed:
            raise GradientStateError(
                "register", f"registry {self.name!r} is closed"
            )
        self._refs.append(weakref.ref(value))
        self._created_count += 1

    def values(self) -> List[IValue]:
        """Return the tracked Values that are still alive, in creation order."""
        alive = []
        refs = []
        for ref in self._refs:
            v = ref()
            if v is not None:
                alive.append(v)
                refs.append(ref)
        self._refs = refs
        return alive

    def find(self, name: str) -> Optional[IValue]:
        """Return the first live Value labelled `name`, or None."""
        for v in self.values():
            if getattr(v, "name", None) == name:
                return v
        return None

    def close(self) -> None:
        """Stop tracking; later registrations raise `GradientStateError`."""
        if self._closed:
            return
        logger.debug(
            "registry %r closed (%d created, %d alive)",
            self.name,
            self._created_count,
            len(self.values()),
        )
        self._refs.clear()
        self._closed = True

    def __len__(self) -> int:
        return len(self.values())

    def __contains__(self, value: Any) -> bool:
        return any(v is value for v in self.values())

    def __iter__(self) -> Iterator[IValue]:
        return iter(self.values())

    def __enter__(self) -> "AutogradValueRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self)} alive"
        return f"AutogradValueRegistry({self.name!r}, {state})"
