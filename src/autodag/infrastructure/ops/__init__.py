"""
Differentiable operations.

Importing this package registers every `Function` implementation with the
operation registry.
"""

from ._elementwise import *
from ._scalar import *
from ._unary import *
from ._matmul import *
from ._reduction import *
from ._shape import *
from ._slice import *
from ._registry import (
    apply_operation,
    get_operation,
    register_operation,
    registered_operations,
)

__all__ = [
    "apply_operation",
    "get_operation",
    "register_operation",
    "registered_operations",
    "resolve_shape",
    "normalize_key",
    "span_key",
    "index_key",
]
