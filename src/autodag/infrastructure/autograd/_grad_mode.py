"""
Thread-local gradient recording mode.

While grad mode is disabled, operations never record history and their
results never require grad. The backward engine enables it for passes run
with `keep_graph=True` and disables it otherwise.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

_state = threading.local()


def is_grad_enabled() -> bool:
    """Return True if operations on this thread currently record history."""
    return getattr(_state, "enabled", True)


@contextmanager
def set_grad_enabled(mode: bool) -> Iterator[None]:
    """
    Set grad mode for the duration of the block, then restore it.

    Parameters
    ----------
    mode : bool
        True to record history, False to suppress it.
    """
    previous = is_grad_enabled()
    _state.enabled = bool(mode)
    try:
        yield
    finally:
        _state.enabled = previous


def no_grad():
    """Context manager disabling history recording."""
    return set_grad_enabled(False)


def enable_grad():
    """Context manager enabling history recording."""
    return set_grad_enabled(True)
