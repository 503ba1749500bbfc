"""Shape and layout validation.

This module provides layout inference, parameter dimension inference, the
per-category rules and the multi-pass driver.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "RULES",
    "ValidationReport",
    "broadcast_sample_shapes",
    "infer_binary_input_dims",
    "infer_input_dims",
    "infer_layout_from_inputs",
    "run_rule",
    "validate_network",
]

from graphshape.validate.dim_inference import infer_binary_input_dims, infer_input_dims
from graphshape.validate.driver import ValidationReport, validate_network
from graphshape.validate.layout_inference import infer_layout_from_inputs
from graphshape.validate.rules import RULES, broadcast_sample_shapes, run_rule
