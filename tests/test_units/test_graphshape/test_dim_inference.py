"""Tests for inferring parameter dimensions from a sibling operand.

Test Coverage:
- TestParameterInference: resize, zero-initialization, warnings, re-run signal
- TestInferenceLimits: non-parameters, partially sized parameters, empty borrows
- TestLearnableParameter: initialization policies
"""

import pytest
import torch

from graphshape import ComputationNode, LearnableParameter, TensorShape
from graphshape.errors import EmptyInferredDimensionError, ParameterInferenceWarning
from graphshape.validate import infer_binary_input_dims, infer_input_dims


class TestParameterInference:
    """Test borrowing dimensions into unsized parameters."""

    def test_parameter_resized_from_peer(self, flat_input, unsized_parameter):
        """Verify an unsized parameter next to a (7 x 4) peer becomes (7 x 4) zeros."""
        w = unsized_parameter()
        x = flat_input("x", (7,), num_cols=4)
        node = ComputationNode("z", "Plus", [w, x])

        with pytest.warns(ParameterInferenceWarning, match=r"resized to \(7 x 4\)"):
            node.validate(False)

        assert w.num_rows == 7
        assert w.num_cols == 4
        assert w.sample_shape == TensorShape.of(7)
        assert w.value is not None
        assert tuple(w.value.shape) == (7, 4)
        assert torch.count_nonzero(w.value).item() == 0

    def test_resize_requests_another_pass(self, flat_input, unsized_parameter):
        w = unsized_parameter()
        node = ComputationNode("z", "Plus", [flat_input("x", (7,), num_cols=4), w])

        with pytest.warns(ParameterInferenceWarning):
            assert node.validate(False) is True
        assert w.changed

        # Dimensions are settled; nothing left to infer
        assert node.validate(False) is False

    def test_resize_takes_new_timestamp(self, flat_input, unsized_parameter):
        w = unsized_parameter()
        node = ComputationNode("z", "Plus", [w, flat_input("x", (7,), num_cols=4)])
        stamp = w.timestamp

        with pytest.warns(ParameterInferenceWarning):
            node.validate(False)

        assert w.timestamp > stamp
        assert node.timestamp > w.timestamp

    def test_zero_initialization_overrides_requested_policy(self, flat_input, unsized_parameter):
        w = unsized_parameter(init_method="gaussian")
        node = ComputationNode("z", "Plus", [w, flat_input("x", (3,), num_cols=2)])

        with pytest.warns(ParameterInferenceWarning):
            node.validate(False)
        assert w.init_method == "zero"
        assert torch.equal(w.value, torch.zeros(3, 2))

    def test_resized_shape_visible_in_same_pass(self, flat_input, unsized_parameter):
        """Verify the consuming node sees the inferred rows immediately."""
        w = unsized_parameter()
        x = flat_input("x", (5,), num_cols=3)
        node = ComputationNode("z", "ElementTimes", [w, x])

        with pytest.warns(ParameterInferenceWarning):
            node.validate(False)
        node.validate(True)
        assert node.sample_shape == TensorShape.of(5)
        assert node.num_cols == 3

    def test_binary_reduce_infers_parameters(self, flat_input, unsized_parameter):
        w = unsized_parameter()
        node = ComputationNode("reg", "SquareError", [w, flat_input("target", (6,), num_cols=2)])

        with pytest.warns(ParameterInferenceWarning):
            assert node.validate(False) is True
        assert (w.num_rows, w.num_cols) == (6, 2)

    def test_infer_binary_input_dims_returns_resized(self, flat_input, unsized_parameter):
        w = unsized_parameter()
        node = ComputationNode("z", "Plus", [flat_input("x", (2,), num_cols=2), w])

        with pytest.warns(ParameterInferenceWarning):
            resized = infer_binary_input_dims(node)
        assert resized == [w]


class TestInferenceLimits:
    """Test cases in which nothing is resized, or resizing fails."""

    def test_non_parameter_is_not_resized(self, flat_input):
        a = flat_input("a", (), num_cols=0)
        b = flat_input("b", (7,), num_cols=4)
        node = ComputationNode("z", "Plus", [a, b])

        assert infer_binary_input_dims(node) == []
        assert a.num_rows == 0
        assert a.num_cols == 0

    def test_sized_parameter_is_left_alone(self, flat_input):
        w = LearnableParameter("W", rows=3, cols=2, init_method="fixed", init_value=0.5)
        node = ComputationNode("z", "Plus", [w, flat_input("x", (3,), num_cols=2)])

        assert infer_binary_input_dims(node) == []
        assert torch.equal(w.value, torch.full((3, 2), 0.5))

    def test_parameter_with_rows_but_no_cols_is_not_inferred(self, flat_input):
        w = LearnableParameter("W", rows=3, cols=0)
        node = ComputationNode("z", "Plus", [w, flat_input("x", (3,), num_cols=2)])

        assert infer_binary_input_dims(node) == []
        assert w.num_cols == 0
        assert w.value is None

    def test_two_unsized_parameters_fail(self, unsized_parameter):
        node = ComputationNode("z", "Plus", [unsized_parameter("W1"), unsized_parameter("W2")])
        with pytest.raises(EmptyInferredDimensionError, match="must not be empty"):
            node.validate(False)

    def test_empty_borrow_names_the_parameter(self, flat_input, unsized_parameter):
        w = unsized_parameter("W")
        node = ComputationNode("z", "Plus", [w, flat_input("x", (4,), num_cols=0)])

        with pytest.raises(EmptyInferredDimensionError) as info:
            infer_input_dims(node, 0, 4, 0)
        assert info.value.node_name == "z"
        assert "W LearnableParameter" in str(info.value)


class TestLearnableParameter:
    """Test parameter construction and initialization."""

    def test_unsized_parameter_has_no_value(self, unsized_parameter):
        w = unsized_parameter()
        assert w.num_rows == 0
        assert w.num_cols == 0
        assert w.value is None

    def test_multi_dimensional_shape(self):
        w = LearnableParameter("W", shape=(2, 3), cols=4, init_method="zero")
        assert w.num_rows == 6
        assert tuple(w.value.shape) == (6, 4)

    def test_uniform_is_seeded_and_bounded(self):
        w1 = LearnableParameter("W1", rows=5, cols=5, seed=7)
        w2 = LearnableParameter("W2", rows=5, cols=5, seed=7)
        assert torch.equal(w1.value, w2.value)
        assert w1.value.abs().max().item() <= 0.05

    def test_unknown_init_method(self):
        with pytest.raises(ValueError, match="init_method"):
            LearnableParameter("W", rows=2, cols=2, init_method="orthogonal")
