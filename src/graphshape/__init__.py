__docformat__ = "restructuredtext"
__version__ = "2026.1.0"
__all__ = [
    "ComputationNetwork",
    "ComputationNode",
    "FrameRange",
    "GraphShape",
    "InputValue",
    "LearnableParameter",
    "MBLayout",
    "TensorShape",
    "ValidationRule",
    "determine_elementwise_tensor_rank",
    "get_tensor_shape",
    "get_tensor_slice_for",
]

from graphshape._graphshape import GraphShape
from graphshape.geometry import (
    determine_elementwise_tensor_rank,
    get_tensor_shape,
    get_tensor_slice_for,
)
from graphshape.network import ComputationNetwork
from graphshape.nodes import ComputationNode, InputValue, LearnableParameter, ValidationRule
from graphshape.shape import FrameRange, MBLayout, TensorShape
