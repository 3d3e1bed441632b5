from ._numpy_backend import NumpyBackend
from ._native_gradients import NumpyNativeGradients

__all__ = [
    NumpyBackend.__name__,
    NumpyNativeGradients.__name__,
]
