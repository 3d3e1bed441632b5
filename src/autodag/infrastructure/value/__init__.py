from ._value import Value

__all__ = [Value.__name__]
