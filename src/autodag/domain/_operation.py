"""
Operation kinds recorded in the computation graph.

`OperationKind` is the closed set of operations a gradient node can record.
Each kind is bound to exactly one `Function` implementation by the operation
registry, and optionally to a native vector-Jacobian product by a native
gradient backend.
"""

from enum import Enum


class OperationKind(Enum):
    """
    Enumeration of differentiable operations.

    Binary elementwise kinds broadcast their operands; the `SCALAR_*` kinds
    combine a Value with a non-differentiable Python scalar.
    """

    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MATMUL = "matmul"
    TRANSPOSE = "transpose"
    RELU = "relu"
    SUM = "sum"
    RESHAPE = "reshape"
    VIEW = "view"
    SLICE = "slice"
    SCATTER = "scatter"
    BROADCAST_TO = "broadcast_to"
    SUM_TO_SHAPE = "sum_to_shape"
    NEG = "neg"
    CLONE = "clone"
    SCALAR_ADD = "scalar_add"
    SCALAR_MUL = "scalar_mul"
    SCALAR_DIV = "scalar_div"
    SCALAR_RSUB = "scalar_rsub"
    SCALAR_RDIV = "scalar_rdiv"

    def __str__(self) -> str:
        return self.value
