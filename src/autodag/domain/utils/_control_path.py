"""
State-based method dispatch ("control paths") via decorators.

This module routes a single method call to one of several registered
implementations depending on the value of an attribute of the instance at
call time. The gradient node uses it to pick between the native and the
symbolic vector-Jacobian product without an if/elif chain in `apply`.

Core idea
---------
- A *base* method is defined on a class; its signature is the canonical one.
- Control paths are registered for that method, each keyed by
  (ClassName, MethodName, StateVal).
- At runtime the installed wrapper reads `getattr(self, state_attr)` and calls
  the implementation registered for that value as `impl(self, *args, **kwargs)`.

Notes
-----
- Registering the first path replaces the base method on the class with the
  dispatching wrapper.
- Registered implementations live in a closure-local mapping owned by the
  builder returned from `create_path_builder`. Different builders never share
  mappings.
"""

from typing import (
    Callable,
    Hashable,
    Optional,
    Union,
    Dict,
    Type,
    Any,
)
from typing_extensions import ParamSpec, TypeVar
from collections import namedtuple
from functools import wraps

P = ParamSpec("P")
R = TypeVar("R")

TrapException = Optional[Union[Type[Exception], Callable[[Callable, Any], None]]]

_MISSING = object()


def create_path_builder(state_attr: str = "_state") -> Callable[
    [Type, Callable[P, R], Hashable, TrapException],
    Callable[[Callable[P, R]], Callable[P, R]],
]:
    """
    Create a "path builder" used to register stateful control paths.

    Usage:

        path = create_path_builder("mode")

        class Engine:
            mode = "fast"

            def run(self, x: int) -> int: ...

        @path(Engine, Engine.run, "fast")
        def _run_fast(self: Engine, x: int) -> int:
            ...

        @path(Engine, Engine.run, "safe")
        def _run_safe(self: Engine, x: int) -> int:
            ...

    Calling `Engine().run(1)` dispatches on `Engine().mode`.

    Parameters
    ----------
    state_attr : str, optional
        Name of the instance attribute (or property) holding the dispatch
        state. Defaults to "_state".

    Returns
    -------
    Callable
        `templator(cls, method, state, trap_exception=None) -> decorator`,
        where `decorator(sub_method)` registers `sub_method` for that control
        path and installs the dispatcher on `cls`.
    """

    MethodKey = namedtuple("MethodKey", ["ClassName", "MethodName", "StateVal"])

    methods_map: Dict[MethodKey, Callable] = {}

    def templator(
        cls: Type,
        method: Callable[P, R],
        state: Hashable,
        trap_exception: TrapException = None,
    ) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """
        Build a decorator that registers a control path implementation.

        Parameters
        ----------
        cls : Type
            Class whose method is wrapped for state-based dispatch.
        method : Callable[P, R]
            The base method. Its metadata is copied onto the installed wrapper.
        state : Hashable
            State value selecting the decorated implementation.
        trap_exception : type[Exception] | Callable, optional
            What happens when no path matches the current state:

            - `None`: raise `NotImplementedError`.
            - an exception class: raise `trap_exception()`.
            - any other callable: call `trap_exception(method, state)` first,
              then raise `NotImplementedError`.

        Raises
        ------
        TypeError
            If `state` is not hashable.
        """
        try:
            hash(state)
        except TypeError:
            raise TypeError(
                f"The argument for 'state' must be hashable. Got {state!r}"
            ) from None

        smk = MethodKey(cls.__name__, method.__name__, state)

        def decorator(sub_method: Callable[P, R]) -> Callable[P, R]:
            methods_map[smk] = sub_method

            @wraps(method)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                cur = getattr(self, state_attr, _MISSING)
                if cur is _MISSING:
                    raise NotImplementedError(
                        "{} is missing attribute {}".format(type(self), repr(state_attr))
                    )
                if sm := methods_map.get(MethodKey(cls.__name__, method.__name__, cur)):
                    return sm(self, *args, **kwargs)
                if isinstance(trap_exception, type) and issubclass(
                    trap_exception, Exception
                ):
                    raise trap_exception()
                if callable(trap_exception):
                    trap_exception(method, cur)
                raise NotImplementedError(
                    "Missing control path (state={}) for {}".format(
                        repr(cur), repr(method)
                    )
                )

            setattr(cls, method.__name__, wrapper)
            return sub_method

        return decorator

    return templator
