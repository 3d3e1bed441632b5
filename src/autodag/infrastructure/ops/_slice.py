"""
Basic-index slicing and its adjoint, scatter.

Slicing keys are normalized to tuples of non-negative ints and step-1
slices with explicit bounds. An int selects one index and drops the axis.
`SLICE` and `SCATTER` are each other's backward rule: the gradient of a
slice is the incoming gradient placed into zeros at the same key.
"""

from typing import Any, Sequence, Tuple

from ...domain._errors import ShapeError
from ...domain._function import Function
from ...domain._operation import OperationKind
from .._settings import get_settings
from ._registry import register_operation

__all__ = ["Slice", "Scatter", "normalize_key", "span_key", "index_key", "key_shape"]

Key = Tuple[Any, ...]


def _check_index(i: int, dim: int, axis: int, shape) -> int:
    if i < 0:
        i += dim
    if not 0 <= i < dim:
        raise ShapeError(
            "slice",
            f"index {i} is out of bounds for axis {axis} with size {dim}",
            shapes=(shape,),
        )
    return i


def normalize_key(key: Any, shape: Sequence[int]) -> Key:
    """
    Normalize a basic indexing key against `shape`.

    Accepts an int, a slice, or a tuple of those. Negative ints count from
    the end; slices are clipped like Python slices but must have step 1.

    Raises
    ------
    ShapeError
        If the key has more entries than `shape` has axes, an int is out of
        bounds, or a slice step is not 1.
    TypeError
        For any other kind of key entry.
    """
    shape = tuple(shape)
    if not isinstance(key, tuple):
        key = (key,)
    if len(key) > len(shape):
        raise ShapeError(
            "slice",
            f"too many indices ({len(key)}) for {len(shape)} dimensions",
            shapes=(shape,),
        )

    out = []
    for axis, (k, dim) in enumerate(zip(key, shape)):
        if isinstance(k, slice):
            start, stop, step = k.indices(dim)
            if step != 1:
                raise ShapeError("slice", f"step {step} is not supported", (shape,))
            out.append(slice(start, max(start, stop)))
        elif isinstance(k, bool) or not hasattr(k, "__index__"):
            raise TypeError(f"Unsupported index {k!r}; expected int or slice")
        else:
            out.append(_check_index(int(k), dim, axis, shape))
    return tuple(out)


def key_shape(key: Key, shape: Sequence[int]) -> Tuple[int, ...]:
    """Shape of the region a normalized `key` selects from `shape`."""
    out = [k.stop - k.start for k in key if isinstance(k, slice)]
    return tuple(out) + tuple(shape[len(key):])


def span_key(
    starts: Sequence[int], lengths: Sequence[int], shape: Sequence[int]
) -> Key:
    """
    Build a key from per-axis start offsets and lengths.

    A length of `-1` selects index `start` and drops the axis. Axes past
    `len(starts)` are kept whole.

    Raises
    ------
    ShapeError
        If the sequences differ in length or a span exceeds its axis.
    """
    shape = tuple(shape)
    if len(starts) != len(lengths) or len(starts) > len(shape):
        raise ShapeError(
            "slice",
            f"{len(starts)} starts and {len(lengths)} lengths for "
            f"{len(shape)} dimensions",
            shapes=(shape,),
        )

    out = []
    for axis, (start, length, dim) in enumerate(zip(starts, lengths, shape)):
        start, length = int(start), int(length)
        if length == -1:
            out.append(_check_index(start, dim, axis, shape))
            continue
        if start < 0 or length < 0 or start + length > dim:
            raise ShapeError(
                "slice",
                f"span [{start}, {start + length}) is out of bounds for axis "
                f"{axis} with size {dim}",
                shapes=(shape,),
            )
        out.append(slice(start, start + length))
    return tuple(out)


def index_key(indexes: Sequence[int], shape: Sequence[int]) -> Key:
    """
    Build a key from one entry per leading axis: `-1` keeps the whole axis,
    `k >= 0` selects index `k` and drops the axis.
    """
    shape = tuple(shape)
    if len(indexes) > len(shape):
        raise ShapeError(
            "slice",
            f"too many indices ({len(indexes)}) for {len(shape)} dimensions",
            shapes=(shape,),
        )
    return tuple(
        slice(0, dim) if int(i) == -1 else _check_index(int(i), dim, axis, shape)
        for axis, (i, dim) in enumerate(zip(indexes, shape))
    )


@register_operation(OperationKind.SLICE)
class Slice(Function):
    @staticmethod
    def forward(ctx, a):
        key = normalize_key(ctx.saved_meta["key"], a.shape)
        ctx.saved_meta["key"] = key
        ctx.saved_meta["src_shape"] = a.shape
        return get_settings().backend.slice(a, key)

    @staticmethod
    def backward(ctx, grad_out):
        meta = ctx.saved_meta
        return (grad_out.scatter(meta["key"], meta["src_shape"]),)


@register_operation(OperationKind.SCATTER)
class Scatter(Function):
    """Place the input at `key` inside zeros of `shape`."""

    @staticmethod
    def forward(ctx, a):
        shape = tuple(int(d) for d in ctx.saved_meta["shape"])
        key = normalize_key(ctx.saved_meta["key"], shape)
        expected = key_shape(key, shape)
        if expected != a.shape:
            raise ShapeError(
                "scatter",
                f"value of shape {a.shape} does not fit region {expected}",
                shapes=(a.shape, expected),
            )
        ctx.saved_meta["key"] = key
        ctx.saved_meta["shape"] = shape
        return get_settings().backend.scatter(a, key, shape)

    @staticmethod
    def backward(ctx, grad_out):
        return (grad_out[ctx.saved_meta["key"]],)
