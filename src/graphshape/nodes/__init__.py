"""Computation graph nodes and operation catalog."""

__docformat__ = "restructuredtext"
__all__ = [
    "OPERATIONS",
    "ComputationNode",
    "InputValue",
    "LearnableParameter",
    "OperationInfo",
    "ValidationRule",
    "get_operation_info",
    "is_known_operation",
    "register_operation",
]

from graphshape.nodes.catalog import (
    OPERATIONS,
    get_operation_info,
    is_known_operation,
    register_operation,
)
from graphshape.nodes.node import ComputationNode, InputValue, LearnableParameter
from graphshape.nodes.types import OperationInfo, ValidationRule
