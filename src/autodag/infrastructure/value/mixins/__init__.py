"""
Mixins composing the public API of `Value`.

Each mixin exposes one family of operations; all of them delegate to
`apply_operation`, so the concrete Value class only holds state.
"""

from ._arithmetic import ValueMixinArithmetic
from ._reduction import ValueMixinReduction
from ._shape import ValueMixinShape

__all__ = [
    ValueMixinArithmetic.__name__,
    ValueMixinReduction.__name__,
    ValueMixinShape.__name__,
]
