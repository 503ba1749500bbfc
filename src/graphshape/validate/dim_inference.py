"""Inference of parameter dimensions from a sibling operand.

When a binary operation sees an input whose rows (or, without a layout,
columns) are still 0, it assumes both operands have the same dimensions and
borrows the missing value from the other operand. Only learnable parameters are
actually resized; for any other node the borrowed value is discarded.

A resized parameter is zero-initialized, replacing whatever initialization was
requested for it. It is not re-validated here: the caller reports the change to
the driver, which schedules another pass.
"""

__docformat__ = "restructuredtext"
__all__ = ["infer_binary_input_dims", "infer_input_dims"]

import warnings

import torch

from graphshape.errors import EmptyInferredDimensionError, ParameterInferenceWarning
from graphshape.nodes import ComputationNode, LearnableParameter
from graphshape.presets import INFERRED_INIT_METHOD, UNRESOLVED
from graphshape.shape import TensorShape


def infer_input_dims(
    node: ComputationNode, index: int, rows: int, cols: int
) -> LearnableParameter | None:
    """Resize input ``index`` of ``node`` if it is an unsized parameter.

    :param node: Consuming node
    :param index: Input position
    :param rows: Row count to apply
    :param cols: Column count to apply
    :return: The resized parameter, or None if nothing was resized
    """
    child = node.input(index)
    if not isinstance(child, LearnableParameter) or child.num_rows != UNRESOLVED:
        return None

    if rows == UNRESOLVED or cols == UNRESOLVED:
        raise EmptyInferredDimensionError(
            f"{node.name} {node.op_name} operation: inferred dimensions "
            f"({rows} x {cols}) of input {child.name} {child.op_name} must not be empty",
            node.name,
            node.op_name,
        )

    # Keeps the tensor shape only if the row count happens to match; otherwise it is lost
    shape = child.sample_shape if rows == child.num_rows else TensorShape((rows,))
    child.set_dims(shape, cols)
    child.value = torch.zeros((rows, cols), dtype=child.dtype)
    child.init_method = INFERRED_INIT_METHOD
    child.mark_changed()
    warnings.warn(
        f"{child.name} {child.op_name} operation inferred, resized to "
        f"({rows} x {cols}), and initialized to 0",
        ParameterInferenceWarning,
        stacklevel=2,
    )
    return child


def infer_binary_input_dims(node: ComputationNode) -> list[LearnableParameter]:
    """Borrow unresolved dimensions between the first two inputs of a node.

    :param node: Node with at least two inputs
    :return: Parameters that were resized (empty if none)
    """
    resized = []
    for index in (0, 1):
        child = node.input(index)
        other = node.input(1 - index)
        if child is None or other is None:
            continue
        rows = other.num_rows if child.num_rows == UNRESOLVED else child.num_rows
        if not child.has_layout and child.num_cols == UNRESOLVED:
            cols = other.num_cols
        else:
            cols = child.num_cols
        parameter = infer_input_dims(node, index, rows, cols)
        if parameter is not None:
            resized.append(parameter)
    return resized
