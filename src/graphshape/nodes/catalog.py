"""Operation catalog.

Maps operation names to the validation rule that derives their shapes.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "OPERATIONS",
    "get_operation_info",
    "is_known_operation",
    "register_operation",
]

from graphshape.nodes.types import OperationInfo, ValidationRule

_LEAF_OPERATIONS = ("InputValue", "SparseInputValue", "LearnableParameter")

_UNARY_MAP_OPERATIONS = (
    "Sigmoid",
    "Tanh",
    "RectifiedLinear",
    "Exp",
    "Log",
    "Cosine",
    "Abs",
    "Negate",
    "Softmax",
    "LogSoftmax",
    "Dropout",
)

# Operation name -> allow_multiples
_BINARY_ZIP_OPERATIONS = {
    "Plus": True,
    "Minus": True,
    "ElementTimes": True,
}

_UNARY_REDUCE_OPERATIONS = ("MatrixL1Reg", "MatrixL2Reg", "SumElements")

_BINARY_REDUCE_OPERATIONS = (
    "CrossEntropyWithSoftmax",
    "CrossEntropy",
    "SquareError",
    "ErrorPrediction",
)

OPERATIONS: dict[str, OperationInfo] = {}


def register_operation(
    op_name: str, rule: ValidationRule, allow_multiples: bool = False
) -> OperationInfo:
    """Register an operation name with its validation rule.

    :param op_name: Operation name
    :param rule: Validation rule
    :param allow_multiples: Multi-broadcast switch for binary zip operations
    :return: Registered operation info
    """
    info = OperationInfo(op_name=op_name, rule=rule, allow_multiples=allow_multiples)
    OPERATIONS[op_name] = info
    return info


def is_known_operation(op_name: str) -> bool:
    return op_name in OPERATIONS


def get_operation_info(op_name: str) -> OperationInfo:
    """Get static properties of an operation.

    :param op_name: Operation name
    :return: Operation info
    """
    if op_name not in OPERATIONS:
        raise ValueError(f"Unsupported operation: {op_name}")
    return OPERATIONS[op_name]


for _name in _LEAF_OPERATIONS:
    register_operation(_name, ValidationRule.LEAF)
for _name in _UNARY_MAP_OPERATIONS:
    register_operation(_name, ValidationRule.UNARY_MAP)
for _name, _allow in _BINARY_ZIP_OPERATIONS.items():
    register_operation(_name, ValidationRule.BINARY_ZIP, allow_multiples=_allow)
for _name in _UNARY_REDUCE_OPERATIONS:
    register_operation(_name, ValidationRule.UNARY_REDUCE)
for _name in _BINARY_REDUCE_OPERATIONS:
    register_operation(_name, ValidationRule.BINARY_REDUCE)
