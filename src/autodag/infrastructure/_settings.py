"""
Process-wide autograd configuration.

`AutogradSettings` collects the injectable collaborators of the engine (the
numeric backend and the native gradient backend) together with the default
gradient strategy and dtype. The active settings object is replaced, never
mutated, so a reference obtained from `get_settings()` stays consistent.

Environment
-----------
AUTODAG_GRADIENT_STRATEGY
    `native` or `symbolic`; initial value of `default_strategy`. An invalid
    value emits a `RuntimeWarning` and falls back to `native`.
"""

from __future__ import annotations

import os
import warnings
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Optional

import numpy as np

from ..domain._backend import INativeGradientBackend, INumericBackend
from ..domain._strategy import GradientStrategy
from .backend import NumpyBackend, NumpyNativeGradients

STRATEGY_ENV_VAR = "AUTODAG_GRADIENT_STRATEGY"


def _strategy_from_env() -> GradientStrategy:
    raw = os.environ.get(STRATEGY_ENV_VAR, "")
    if not raw.strip():
        return GradientStrategy.NATIVE
    try:
        return GradientStrategy.parse(raw)
    except ValueError as e:
        warnings.warn(
            f"Ignoring {STRATEGY_ENV_VAR}={raw!r}; using 'native'. Reason: {e}",
            RuntimeWarning,
            stacklevel=2,
        )
        return GradientStrategy.NATIVE


@dataclass(frozen=True)
class AutogradSettings:
    """
    Immutable snapshot of the autograd configuration.

    Attributes
    ----------
    default_strategy : GradientStrategy
        Strategy preferred for gradient nodes when nothing forces symbolic.
    backend : INumericBackend
        Kernels used by every Value operation.
    native_gradients : INativeGradientBackend | None
        Native VJP provider. `None` disables native dispatch entirely.
    dtype : numpy.dtype
        Element type of newly created Values.
    """

    default_strategy: GradientStrategy = field(default_factory=_strategy_from_env)
    backend: INumericBackend = field(default_factory=NumpyBackend)
    native_gradients: Optional[INativeGradientBackend] = field(
        default_factory=NumpyNativeGradients
    )
    dtype: Any = np.float32


_settings = AutogradSettings()


def get_settings() -> AutogradSettings:
    """Return the active settings."""
    return _settings


def configure(**changes: Any) -> AutogradSettings:
    """
    Replace the active settings with an updated copy.

    Parameters
    ----------
    **changes
        Field values to override (e.g. `default_strategy=GradientStrategy.SYMBOLIC`).

    Returns
    -------
    AutogradSettings
        The new active settings.

    Raises
    ------
    TypeError
        If a key does not name a settings field.
    """
    global _settings
    _settings = replace(_settings, **changes)
    return _settings


@contextmanager
def settings_scope(**changes: Any) -> Iterator[AutogradSettings]:
    """
    Temporarily override settings, restoring the previous ones on exit.

    Examples
    --------
    >>> with settings_scope(default_strategy=GradientStrategy.SYMBOLIC):
    ...     loss.backward()
    """
    global _settings
    previous = _settings
    try:
        yield configure(**changes)
    finally:
        _settings = previous
