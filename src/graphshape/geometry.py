"""Tensor geometry of node values.

The value of a node is a matrix whose rows hold one sample and whose columns
are the minibatch. As a tensor it is the sample shape followed by either the
column axis (flat data) or the (parallel sequence, time step) axes taken from
the node's layout.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "determine_elementwise_tensor_rank",
    "get_tensor_shape",
    "get_tensor_slice_for",
]

from graphshape.errors import GraphShapeError
from graphshape.nodes import ComputationNode
from graphshape.shape import FrameRange, TensorShape, tensor_slice_for


def _effective_rank(node: ComputationNode) -> int:
    rank = node.sample_shape.rank
    # Without a layout the column axis is part of the tensor, for the consuming node too
    if not node.has_layout:
        rank += 1
    return rank


def determine_elementwise_tensor_rank(node: ComputationNode) -> int:
    """Get the tensor rank to use for an element-wise operation.

    Takes the largest rank among the node's own sample shape and those of its
    inputs, counting one extra axis for every node without a layout.

    :param node: Node performing the operation
    :return: Working tensor rank
    """
    max_rank = _effective_rank(node)
    for child in node.inputs:
        if child is not None:
            max_rank = max(max_rank, _effective_rank(child))
    return max_rank


def get_tensor_shape(node: ComputationNode, rank: int) -> TensorShape:
    """Get the shape of the node's whole value as a tensor.

    :param node: Node whose value is described
    :param rank: Axis position of the sequence axis when the node has a layout
    :return: Full tensor shape
    """
    shape = node.sample_shape
    if node.layout is None:
        return shape.append(shape.rank, node.num_cols)
    return shape.append(rank, node.layout.num_parallel_sequences).append(
        rank + 1, node.layout.num_time_steps
    )


def get_tensor_slice_for(node: ComputationNode, rank: int, frame_range: FrameRange) -> TensorShape:
    """Get the shape of the part of a node's value selected by a frame range.

    The result keeps the strides of the full tensor, so it describes a view.

    :param node: Node whose value is sliced
    :param rank: Axis position of the sequence axis when the node has a layout
    :param frame_range: Requested time step and/or sequence
    :return: Narrowed tensor shape
    """
    shape = get_tensor_shape(node, rank)
    try:
        begin, end = tensor_slice_for(shape.dims, frame_range, node.layout)
    except GraphShapeError as error:
        raise type(error)(
            f"{node.name} {node.op_name} operation: {error}", node.name, node.op_name
        ) from error
    return shape.narrow_to(begin, end)
