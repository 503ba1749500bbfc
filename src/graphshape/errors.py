"""Errors and warnings raised during shape and layout validation.

Every error carries the name and operation of the node being validated so that
a failure can be traced without re-running with extra instrumentation.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "DimensionMismatchError",
    "EmptyInferredDimensionError",
    "GraphShapeError",
    "InputError",
    "InvalidBroadcastError",
    "InvalidFrameRangeError",
    "LatentInconsistencyWarning",
    "LayoutMismatchError",
    "NonConvergenceError",
    "ParameterInferenceWarning",
]


class GraphShapeError(ValueError):
    """Base class for all validation failures.

    :param message: Human-readable description
    :param node_name: Name of the node being validated (None if not node-specific)
    :param op_name: Operation name of that node
    """

    def __init__(self, message: str, node_name: str | None = None, op_name: str | None = None):
        super().__init__(message)
        self.node_name = node_name
        self.op_name = op_name


class LayoutMismatchError(GraphShapeError):
    """Two inputs carry distinct, non-null minibatch layouts."""


class DimensionMismatchError(GraphShapeError):
    """Row/column counts of two operands are incompatible."""


class InvalidBroadcastError(GraphShapeError):
    """Sample shapes differ along an axis where neither side is 1."""


class EmptyInferredDimensionError(GraphShapeError):
    """A dimension that must be resolved is still 0."""


class InputError(GraphShapeError):
    """Wrong number of inputs, or an input that was never connected."""


class InvalidFrameRangeError(GraphShapeError):
    """A frame range that cannot be applied to the node's tensor."""


class NonConvergenceError(GraphShapeError):
    """The multi-pass driver did not reach a fixed point.

    :param message: Human-readable description
    :param unstable: Names of the nodes that still changed in the last pass
    """

    def __init__(self, message: str, unstable: list[str]):
        super().__init__(message)
        self.unstable = unstable


class LatentInconsistencyWarning(UserWarning):
    """An input was skipped because it is not connected yet."""


class ParameterInferenceWarning(UserWarning):
    """A learnable parameter was resized from a sibling and zero-initialized."""
