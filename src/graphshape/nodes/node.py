"""Computation graph nodes.

A node holds the shape state that validation derives: the sample shape, the
column count and the minibatch layout handle. Nodes are created unresolved and
are only mutated by the validation rule of their operation.
"""

__docformat__ = "restructuredtext"
__all__ = ["ComputationNode", "InputValue", "LearnableParameter"]

import itertools
from collections.abc import Sequence

import torch

from graphshape.errors import InputError
from graphshape.nodes.catalog import get_operation_info
from graphshape.nodes.types import ValidationRule
from graphshape.presets import DEFAULT_DTYPE, NULL_INPUT_NAME, UNRESOLVED
from graphshape.shape import MBLayout, TensorShape

# Global change counter; a node's timestamp is bumped whenever its state changes
_TIMESTAMPS = itertools.count(1)


class ComputationNode:
    """One operation instance in the computation graph.

    :param name: Unique node name
    :param op_name: Operation name, looked up in the operation catalog
    :param inputs: Ordered input nodes (None for inputs not wired yet)
    :param allow_multiples: Override the catalog's multi-broadcast switch
    """

    def __init__(
        self,
        name: str,
        op_name: str,
        inputs: Sequence["ComputationNode | None"] = (),
        allow_multiples: bool | None = None,
    ):
        info = get_operation_info(op_name)
        self.name = name
        self.op_name = op_name
        self.rule = info.rule
        self.allow_multiples = info.allow_multiples if allow_multiples is None else allow_multiples
        self.inputs: list[ComputationNode | None] = list(inputs)

        self.sample_shape = TensorShape()
        self.num_cols = UNRESOLVED
        self.layout: MBLayout | None = None

        self.validated = False
        self.changed = False
        self.timestamp = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name!r}, {self.op_name!r}, "
            f"shape={self.sample_shape}, cols={self.num_cols}, layout={self.layout!r})"
        )

    @property
    def num_rows(self) -> int:
        """Rows of the legacy matrix view: elements per sample, 0 if unresolved."""
        if self.sample_shape.rank == 0:
            return UNRESOLVED
        return self.sample_shape.num_elements

    @property
    def has_layout(self) -> bool:
        return self.layout is not None

    @property
    def is_leaf(self) -> bool:
        return self.rule is ValidationRule.LEAF

    @property
    def num_inputs(self) -> int:
        return len(self.inputs)

    def input(self, index: int) -> "ComputationNode | None":
        if not 0 <= index < len(self.inputs):
            raise InputError(
                f"{self.name} {self.op_name} operation has no input [{index}]",
                self.name,
                self.op_name,
            )
        return self.inputs[index]

    def set_input(self, index: int, node: "ComputationNode | None") -> None:
        """Connect an input, growing the input list as needed."""
        while len(self.inputs) <= index:
            self.inputs.append(None)
        self.inputs[index] = node

    def set_dims(self, sample_shape: TensorShape, num_cols: int) -> None:
        self.sample_shape = sample_shape
        self.num_cols = num_cols

    def set_dims_from(self, node: "ComputationNode") -> None:
        """Copy sample shape and column count from another node."""
        self.set_dims(node.sample_shape, node.num_cols)

    def link_to_layout(self, layout: MBLayout | None) -> None:
        self.layout = layout

    def mark_changed(self) -> None:
        """Flag a shape or layout change and take a new timestamp."""
        self.changed = True
        self.timestamp = next(_TIMESTAMPS)

    def _state(self) -> tuple:
        return self.sample_shape.dims, self.num_cols, self.layout

    def validate(self, is_final_pass: bool) -> bool:
        """Run this node's validation rule.

        :param is_final_pass: Whether mismatches are fatal
        :return: True if shape or layout changed, or a parameter input was
            resized and another pass is needed
        """
        from graphshape.validate.rules import run_rule

        dims, cols, layout = self._state()
        rerun = run_rule(self, is_final_pass)
        self.changed = (
            rerun
            or dims != self.sample_shape.dims
            or cols != self.num_cols
            or layout is not self.layout
        )
        if self.changed:
            self.mark_changed()
        if is_final_pass:
            self.validated = True
        return self.changed

    def dump_node_info(self) -> str:
        """Format node name, operation and input names for tracing."""
        text = f"\n{self.name}={self.op_name}"
        if not self.is_leaf:
            names = [node.name if node is not None else NULL_INPUT_NAME for node in self.inputs]
            text += "(" + ",".join(names) + ")"
        return text


class InputValue(ComputationNode):
    """Graph input whose sample shape is declared up front.

    :param name: Node name
    :param shape: Sample shape (tuple of dims or TensorShape)
    :param layout: Minibatch layout of the fed data (None for flat data)
    :param num_cols: Column count for flat data; ignored with a layout
    :param op_name: "InputValue" or "SparseInputValue"
    """

    def __init__(
        self,
        name: str,
        shape: TensorShape | tuple[int, ...],
        layout: MBLayout | None = None,
        num_cols: int = UNRESOLVED,
        op_name: str = "InputValue",
    ):
        super().__init__(name, op_name)
        if not isinstance(shape, TensorShape):
            shape = TensorShape(tuple(shape))
        self.link_to_layout(layout)
        self.set_dims(shape, layout.num_cols if layout is not None else num_cols)


class LearnableParameter(ComputationNode):
    """Trainable parameter; the only node whose shape may be inferred from a peer.

    Dimensions left at 0 are borrowed from the sibling operand of the first
    binary operation that consumes the parameter.

    :param name: Node name
    :param rows: Row count (0 = infer); ignored if ``shape`` is given
    :param cols: Column count (0 = infer)
    :param shape: Explicit multi-dimensional sample shape
    :param init_method: "uniform", "gaussian", "fixed" or "zero"
    :param init_value: Value used by the "fixed" method
    :param init_value_scale: Scale of the random methods
    :param seed: Random seed for the random methods
    :param dtype: Element type of the value storage
    """

    def __init__(
        self,
        name: str,
        rows: int = UNRESOLVED,
        cols: int = UNRESOLVED,
        shape: TensorShape | tuple[int, ...] | None = None,
        init_method: str = "uniform",
        init_value: float = 0.0,
        init_value_scale: float = 1.0,
        seed: int = 0,
        dtype: torch.dtype = DEFAULT_DTYPE,
    ):
        super().__init__(name, "LearnableParameter")
        if shape is None:
            shape = TensorShape((rows,)) if rows != UNRESOLVED else TensorShape()
        elif not isinstance(shape, TensorShape):
            shape = TensorShape(tuple(shape))
        self.init_method = init_method
        self.init_value = init_value
        self.init_value_scale = init_value_scale
        self.seed = seed
        self.dtype = dtype
        self.value: torch.Tensor | None = None
        self.set_dims(shape, cols)
        if self.num_rows != UNRESOLVED and self.num_cols != UNRESOLVED:
            self.initialize()

    def initialize(self) -> torch.Tensor:
        """Allocate the value storage according to the initialization policy.

        :return: Newly allocated (rows, cols) tensor
        """
        size = (self.num_rows, self.num_cols)
        if self.init_method == "zero":
            value = torch.zeros(size, dtype=self.dtype)
        elif self.init_method == "fixed":
            value = torch.full(size, self.init_value, dtype=self.dtype)
        elif self.init_method in ("uniform", "gaussian"):
            generator = torch.Generator().manual_seed(self.seed)
            if self.init_method == "uniform":
                value = (torch.rand(size, generator=generator, dtype=self.dtype) - 0.5) * 0.1
            else:
                value = torch.randn(size, generator=generator, dtype=self.dtype) * 0.2
                value /= max(self.num_cols, 1) ** 0.5
            value *= self.init_value_scale
        else:
            raise ValueError(f"Unsupported init_method: {self.init_method}")
        self.value = value
        return value
