"""
Shape descriptor and broadcasting rules.

This module defines `Size`, an immutable ordered sequence of non-negative
dimension sizes, and the broadcasting helpers used by every elementwise
operation and by gradient reduction.

Broadcasting rule
-----------------
Two shapes are broadcast-compatible if, aligning trailing dimensions, each
pair of aligned sizes is equal or one of them is 1. A shape with fewer
dimensions is treated as if it were left-padded with ones.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple, Union

from ._errors import ShapeError

SizeLike = Union["Size", Iterable[int], int]


def _is_dim_or_size(x: object) -> bool:
    return isinstance(x, Size) or hasattr(x, "__index__")


class Size:
    """
    Immutable tensor shape.

    A `Size` may be built from individual ints, from a single iterable of
    ints, or from other `Size` objects, which are concatenated:

        Size(2, 3)                      -> Size(2, 3)
        Size((2, 3))                    -> Size(2, 3)
        Size(Size(2, 128), Size(512))   -> Size(2, 128, 512)
        Size()                          -> Size()  (scalar)

    Notes
    -----
    - `Size` compares equal to a tuple with the same dimensions, so it can be
      used interchangeably with NumPy shapes in assertions.
    - `__slots__` prevents attribute creation; the dimensions tuple is never
      mutated after construction.
    """

    __slots__ = ("_dims",)

    def __init__(self, *dims: SizeLike) -> None:
        """
        Build a Size from ints, iterables of ints, or other Size objects.

        Raises
        ------
        ShapeError
            If any dimension is negative or not an integer.
        """
        if len(dims) == 1 and not _is_dim_or_size(dims[0]):
            try:
                dims = tuple(dims[0])  # type: ignore[arg-type]
            except TypeError:
                raise ShapeError(
                    "size", f"dimension {dims[0]!r} is not an integer"
                ) from None

        flat: list[int] = []
        for d in dims:
            if isinstance(d, Size):
                flat.extend(d._dims)
                continue
            if isinstance(d, bool) or not hasattr(d, "__index__"):
                raise ShapeError("size", f"dimension {d!r} is not an integer")
            d = int(d.__index__())
            if d < 0:
                raise ShapeError("size", f"negative dimension {d}")
            flat.append(d)
        self._dims: Tuple[int, ...] = tuple(flat)

    @classmethod
    def of(cls, size: SizeLike) -> "Size":
        """
        Coerce a Size-like argument into a `Size`.

        Parameters
        ----------
        size : Size | Iterable[int] | int
            Existing Size (returned as-is), iterable of dims, or a single int.
        """
        if isinstance(size, Size):
            return size
        if hasattr(size, "__index__"):
            return cls(size)
        return cls(tuple(size))

    def dimensions(self) -> Tuple[int, ...]:
        """Return the dimensions as a plain tuple."""
        return self._dims

    @property
    def ndim(self) -> int:
        return len(self._dims)

    def numel(self) -> int:
        """
        Return the number of elements described by this shape.

        An empty Size (scalar) has one element.
        """
        n = 1
        for d in self._dims:
            n *= d
        return n

    def is_broadcast_compatible(self, other: SizeLike) -> bool:
        """Return True if this shape broadcasts with `other`."""
        try:
            broadcast_shape(self, other)
        except ShapeError:
            return False
        return True

    def broadcast_with(self, other: SizeLike) -> "Size":
        """Return the broadcast result of this shape and `other`."""
        return broadcast_shape(self, other)

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __getitem__(self, index: int) -> int:
        return self._dims[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Size):
            return self._dims == other._dims
        if isinstance(other, tuple):
            return self._dims == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dims)

    def __repr__(self) -> str:
        return f"Size({', '.join(str(d) for d in self._dims)})"


def broadcast_shape(a: SizeLike, b: SizeLike) -> Size:
    """
    Compute the broadcast result shape of `a` and `b`.

    Parameters
    ----------
    a, b : Size | Iterable[int]
        Operand shapes.

    Returns
    -------
    Size
        The broadcast shape.

    Raises
    ------
    ShapeError
        If an aligned pair of dimensions differs and neither is 1.
    """
    da = Size.of(a).dimensions()
    db = Size.of(b).dimensions()

    rank = max(len(da), len(db))
    pa = (1,) * (rank - len(da)) + da
    pb = (1,) * (rank - len(db)) + db

    out = []
    for i, (x, y) in enumerate(zip(pa, pb)):
        if x == y or y == 1:
            out.append(x)
        elif x == 1:
            out.append(y)
        else:
            raise ShapeError(
                "broadcast",
                f"shapes {da} and {db} conflict at axis {i} ({x} vs {y})",
                shapes=(da, db),
            )
    return Size(tuple(out))


def reduce_axes_for(
    src_shape: SizeLike, target_shape: SizeLike
) -> Tuple[Tuple[int, ...], int]:
    """
    Compute the axes to sum when reducing `src_shape` back to `target_shape`.

    `target_shape` is left-padded with ones to the rank of `src_shape`; an
    axis is reduced when the padded target has size 1 and the source does not.

    Returns
    -------
    reduce_axes : tuple[int, ...]
        Axes of the source to sum over with `keepdims=True`.
    pad : int
        Number of leading axes to drop afterwards (rank difference).

    Raises
    ------
    ShapeError
        If `target_shape` has a higher rank than `src_shape` or could not have
        been broadcast to `src_shape`.
    """
    src = Size.of(src_shape).dimensions()
    tgt = Size.of(target_shape).dimensions()

    if len(tgt) > len(src):
        raise ShapeError(
            "reduce_to_shape",
            f"target rank {len(tgt)} > source rank {len(src)}",
            shapes=(src, tgt),
        )

    pad = len(src) - len(tgt)
    padded_tgt = (1,) * pad + tgt

    for i, (sd, td) in enumerate(zip(src, padded_tgt)):
        if td not in (1, sd):
            raise ShapeError(
                "reduce_to_shape",
                f"cannot reduce {src} to {tgt}: axis {i} has {sd} vs {td}",
                shapes=(src, tgt),
            )

    reduce_axes = tuple(
        i for i, (sd, td) in enumerate(zip(src, padded_tgt)) if td == 1 and sd != 1
    )
    return reduce_axes, pad
