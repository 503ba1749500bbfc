"""Shape and layout rules per operation category.

Each rule reads the shapes and layouts of a node's inputs, derives the node's
own shape and layout and writes them into the node. Dimension mismatches are
only fatal on the final pass, since on earlier passes upstream inference may
still resolve them. Layout conflicts and structural errors are always fatal.

Every rule returns True when it resized a parameter input, i.e. when the
driver must run another pass.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "RULES",
    "Rule",
    "broadcast_sample_shapes",
    "run_rule",
    "validate_base",
    "validate_binary_reduce",
    "validate_binary_zip",
    "validate_leaf",
    "validate_unary_map",
    "validate_unary_reduce",
]

from collections.abc import Callable

from graphshape.errors import (
    DimensionMismatchError,
    EmptyInferredDimensionError,
    InputError,
    InvalidBroadcastError,
)
from graphshape.nodes import ComputationNode, ValidationRule
from graphshape.presets import UNRESOLVED
from graphshape.shape import TensorShape
from graphshape.validate.dim_inference import infer_binary_input_dims
from graphshape.validate.layout_inference import infer_layout_from_inputs

Rule = Callable[[ComputationNode, bool], bool]

SCALAR_SHAPE = TensorShape((1,))


def _check_num_inputs(node: ComputationNode, expected: int, at_least: bool = False) -> None:
    count = node.num_inputs
    if count == expected or (at_least and count > expected):
        return
    qualifier = "at least " if at_least else ""
    raise InputError(
        f"{node.name} {node.op_name} operation requires {qualifier}{expected} "
        f"input(s), got {count}",
        node.name,
        node.op_name,
    )


def _inputs_connected(node: ComputationNode) -> bool:
    return all(child is not None for child in node.inputs)


def validate_base(node: ComputationNode, is_final_pass: bool) -> None:
    """Checks shared by all rules.

    On the final pass every input must be connected and hold at least one
    element.

    :param node: Node being validated
    :param is_final_pass: Whether this is the final pass
    """
    if not is_final_pass:
        return
    for index, child in enumerate(node.inputs):
        if child is None:
            raise InputError(
                f"Input [{index}] of {node.op_name} node '{node.name}' is empty "
                f"(NULL, not connected)",
                node.name,
                node.op_name,
            )
        if child.num_rows == UNRESOLVED or (not child.has_layout and child.num_cols == UNRESOLVED):
            raise DimensionMismatchError(
                f"{node.name} {node.op_name} operation: input {child.name} "
                f"{child.op_name} has 0 elements ({child.num_rows} x {child.num_cols})",
                node.name,
                node.op_name,
            )


def validate_leaf(node: ComputationNode, is_final_pass: bool) -> bool:
    """Inputs and parameters: keep the declared shape, reject holes at the end."""
    _check_num_inputs(node, 0)
    if node.layout is not None:
        node.num_cols = node.layout.num_cols
    if is_final_pass and (
        not node.sample_shape.is_resolved
        or (not node.has_layout and node.num_cols == UNRESOLVED)
    ):
        raise EmptyInferredDimensionError(
            f"{node.name} {node.op_name} operation: dimensions "
            f"{node.sample_shape} x {node.num_cols} are still unresolved",
            node.name,
            node.op_name,
        )
    return False


def validate_unary_map(node: ComputationNode, is_final_pass: bool) -> bool:
    """Single input mapped element-wise (e.g. Sigmoid)."""
    _check_num_inputs(node, 1)
    validate_base(node, is_final_pass)
    infer_layout_from_inputs(node)
    child = node.input(0)
    if child is not None:
        node.set_dims_from(child)
    return False


def broadcast_sample_shapes(
    node: ComputationNode,
    child0: ComputationNode,
    child1: ComputationNode,
    is_final_pass: bool,
) -> TensorShape:
    """Broadcast the sample shapes of two inputs axis by axis.

    The shorter shape is padded with trailing 1s. A 1 on either side takes the
    other side's dimension; otherwise both must match.

    :param node: Node being validated (for error context)
    :param child0: Input 0
    :param child1: Input 1
    :param is_final_pass: Whether a mismatch is fatal
    :return: Broadcast result shape
    """
    shape0, shape1 = child0.sample_shape, child1.sample_shape
    dims = list(shape0.dims)
    if shape1.rank > len(dims):
        dims.extend([1] * (shape1.rank - len(dims)))

    for k, dim1 in enumerate(shape1.dims):
        if dims[k] == 1:
            dims[k] = dim1
        elif dim1 == 1:
            pass
        elif is_final_pass and dim1 != dims[k]:
            raise InvalidBroadcastError(
                f"{node.name} {node.op_name} operation: input dimensions {shape0} of "
                f"{child0.name} and {shape1} of {child1.name} are not compatible",
                node.name,
                node.op_name,
            )
    return TensorShape(tuple(dims))


def _divides(divisor: int, value: int) -> bool:
    return divisor != 0 and value % divisor == 0


def _matrix_dims_compatible(
    node: ComputationNode, child0: ComputationNode, child1: ComputationNode
) -> bool:
    rows0, cols0 = child0.num_rows, child0.num_cols
    rows1, cols1 = child1.num_rows, child1.num_cols
    same_cols = child0.layout is child1.layout or cols0 == cols1
    allow = node.allow_multiples

    if rows0 == rows1 and same_cols:
        return True
    if allow and (rows0 == 1 or rows1 == 1) and same_cols:
        return True
    # Only input 0 may hold a multiple of input 1's columns
    return allow and (
        (not node.has_layout and cols0 > cols1 and _divides(cols1, cols0))
        or (cols0 == 1 and _divides(rows0, rows1))
        or (cols1 == 1 and _divides(rows1, rows0))
    )


def validate_binary_zip(node: ComputationNode, is_final_pass: bool) -> bool:
    """Two inputs combined element-wise with broadcasting (e.g. Plus).

    Unsized parameter inputs are resized to match the other operand.
    """
    _check_num_inputs(node, 2)
    validate_base(node, is_final_pass)
    infer_layout_from_inputs(node)
    if not _inputs_connected(node):
        return False

    rerun = bool(infer_binary_input_dims(node))
    child0, child1 = node.input(0), node.input(1)

    shape = broadcast_sample_shapes(node, child0, child1, is_final_pass)

    if is_final_pass and not _matrix_dims_compatible(node, child0, child1):
        raise DimensionMismatchError(
            f"The matrix dimensions in the {node.name} {node.op_name} operation do not "
            f"match: {child0.name} is ({child0.num_rows} x {child0.num_cols}), "
            f"{child1.name} is ({child1.num_rows} x {child1.num_cols})",
            node.name,
            node.op_name,
        )

    if node.layout is not None:
        num_cols = node.layout.num_cols
    else:
        num_cols = max(child0.num_cols, child1.num_cols)
    node.set_dims(shape, num_cols)
    return rerun


def validate_unary_reduce(node: ComputationNode, is_final_pass: bool) -> bool:
    """Single input reduced to one value (e.g. MatrixL1Reg)."""
    _check_num_inputs(node, 1)
    validate_base(node, is_final_pass)
    node.link_to_layout(None)
    node.set_dims(SCALAR_SHAPE, 1)
    return False


def validate_binary_reduce(node: ComputationNode, is_final_pass: bool) -> bool:
    """Two inputs reduced to one value (criterion nodes).

    Also infers parameter inputs, e.g. a parameter regularized by a criterion
    while also feeding other operations.
    """
    _check_num_inputs(node, 2, at_least=True)
    validate_base(node, is_final_pass)
    node.link_to_layout(None)

    rerun = False
    child0, child1 = node.input(0), node.input(1)
    if child0 is not None and child1 is not None:
        rerun = bool(infer_binary_input_dims(node))
        if is_final_pass and not (
            child0.num_rows == child1.num_rows
            and (child0.has_layout or child0.num_cols == child1.num_cols)
        ):
            raise DimensionMismatchError(
                f"The matrix dimensions in the {node.name} {node.op_name} operation do "
                f"not match: {child0.name} is ({child0.num_rows} x {child0.num_cols}), "
                f"{child1.name} is ({child1.num_rows} x {child1.num_cols})",
                node.name,
                node.op_name,
            )

    node.set_dims(SCALAR_SHAPE, 1)
    return rerun


RULES: dict[ValidationRule, Rule] = {
    ValidationRule.LEAF: validate_leaf,
    ValidationRule.UNARY_MAP: validate_unary_map,
    ValidationRule.BINARY_ZIP: validate_binary_zip,
    ValidationRule.UNARY_REDUCE: validate_unary_reduce,
    ValidationRule.BINARY_REDUCE: validate_binary_reduce,
}


def run_rule(node: ComputationNode, is_final_pass: bool) -> bool:
    """Dispatch a node to the rule of its operation category.

    :param node: Node to validate
    :param is_final_pass: Whether mismatches are fatal
    :return: True if another validation pass was requested
    """
    return RULES[node.rule](node, is_final_pass)
