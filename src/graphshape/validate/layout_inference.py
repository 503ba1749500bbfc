"""Minibatch layout inference for element-wise operations.

All inputs that carry a layout must share the very same layout object. Inputs
without a layout (parameters, constants) never constrain the result.
"""

__docformat__ = "restructuredtext"
__all__ = ["infer_layout_from_inputs"]

import warnings

from graphshape.errors import LatentInconsistencyWarning, LayoutMismatchError
from graphshape.nodes import ComputationNode
from graphshape.shape import MBLayout


def infer_layout_from_inputs(node: ComputationNode) -> MBLayout | None:
    """Infer the layout of a node from its inputs and install it.

    :param node: Node whose layout is inferred
    :return: Installed layout (None if no input carries one)
    """
    layout = None
    for child in node.inputs:
        if child is None:
            warnings.warn(
                f"{node.name} {node.op_name} operation: skipping input that is not "
                f"connected yet; layout inference may be incomplete",
                LatentInconsistencyWarning,
                stacklevel=2,
            )
        elif child.layout is None:
            continue
        elif layout is None:
            layout = child.layout
        elif child.layout is not layout:
            raise LayoutMismatchError(
                f"Found inconsistent layout in {node.name} {node.op_name} operation, "
                f"mismatch detected for input {child.name} {child.op_name} "
                f"({child.layout!r} vs. {layout!r})",
                node.name,
                node.op_name,
            )
    node.link_to_layout(layout)
    return layout
