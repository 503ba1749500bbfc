"""Default settings for validation.

Provides the constants shared by the driver, the parameter inference and the
facade class.
"""

__docformat__ = "restructuredtext"
__all__ = [
    "DEFAULT_DTYPE",
    "DEFAULT_MAX_PASSES",
    "INFERRED_INIT_METHOD",
    "NULL_INPUT_NAME",
    "UNRESOLVED",
]

import torch

# Dimension value meaning "not inferred yet"; never legal after the final pass
UNRESOLVED = 0

# Non-final passes allowed before the driver gives up
DEFAULT_MAX_PASSES = 20

# Initialization policy written onto a parameter whose shape was borrowed
INFERRED_INIT_METHOD = "zero"

DEFAULT_DTYPE = torch.float32

# Placeholder used by node dumps for inputs that are not wired
NULL_INPUT_NAME = "NULL"
