"""Operation classification types.

Every operation is validated by exactly one rule from a closed set.
"""

__docformat__ = "restructuredtext"
__all__ = ["OperationInfo", "ValidationRule"]

from dataclasses import dataclass
from enum import Enum


class ValidationRule(Enum):
    """Shape/layout rule applied to a node during each validation pass.

    :cvar LEAF: Input or parameter; shape is given, not derived
    :cvar UNARY_MAP: Element-wise map of one input (Sigmoid, Tanh)
    :cvar BINARY_ZIP: Element-wise combination of two inputs (Plus, ElementTimes)
    :cvar UNARY_REDUCE: Reduction of one input to a scalar (MatrixL1Reg)
    :cvar BINARY_REDUCE: Reduction of two inputs to a scalar (criteria)
    """

    LEAF = "leaf"
    UNARY_MAP = "unary_map"
    BINARY_ZIP = "binary_zip"
    UNARY_REDUCE = "unary_reduce"
    BINARY_REDUCE = "binary_reduce"


@dataclass(frozen=True)
class OperationInfo:
    """Static properties of an operation.

    :param op_name: Operation name (e.g., "Plus", "LearnableParameter")
    :param rule: Validation rule used for nodes of this operation
    :param allow_multiples: Binary zip only: allow one operand to be a
        sub-dimension of the other
    """

    op_name: str
    rule: ValidationRule
    allow_multiples: bool = False
