"""Shape and layout descriptors.

This module provides the tensor shape type, minibatch layout handles and frame
ranges used by validation and tensor geometry.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "FrameRange",
    "MBLayout",
    "TensorShape",
    "dense_strides",
    "tensor_slice_for",
]

from graphshape.shape.layout import FrameRange, MBLayout, tensor_slice_for
from graphshape.shape.tensor_shape import TensorShape, dense_strides
