"""Tests for the tensor shape descriptor.

Test Coverage:
- TestTensorShapeBasics: construction, rank, elements, formatting
- TestTensorShapePadding: pad_rank and append
- TestTensorShapeNarrowing: narrow_to and strided views
"""

import numpy as np
import pytest
import torch

from graphshape import TensorShape
from graphshape.shape import dense_strides


class TestTensorShapeBasics:
    """Test construction and simple properties."""

    def test_dense_strides_are_column_major(self):
        """Verify the first axis is the fastest-varying one."""
        assert dense_strides((3, 4, 5)) == (1, 3, 12)
        assert TensorShape.of(3, 4, 5).strides == (1, 3, 12)

    def test_rank_and_elements(self):
        shape = TensorShape.of(3, 4)
        assert shape.rank == 2
        assert shape.num_elements == 12
        assert shape[1] == 4
        assert list(shape) == [3, 4]

    def test_empty_shape_is_unresolved(self):
        assert TensorShape().rank == 0
        assert not TensorShape().is_resolved

    def test_zero_dimension_is_unresolved(self):
        assert not TensorShape.of(3, 0).is_resolved
        assert TensorShape.of(3, 1).is_resolved

    def test_negative_dimension_rejected(self):
        with pytest.raises(ValueError, match="Negative"):
            TensorShape.of(3, -1)

    def test_stride_count_must_match_rank(self):
        with pytest.raises(ValueError):
            TensorShape((3, 4), strides=(1,))

    def test_string_format(self):
        assert str(TensorShape.of(3, 4)) == "[3 x 4]"
        assert str(TensorShape()) == "[]"

    def test_equality_is_structural(self):
        assert TensorShape.of(3, 4) == TensorShape((3, 4))
        assert TensorShape.of(3, 4) != TensorShape.of(4, 3)


class TestTensorShapePadding:
    """Test padding and appending dimensions."""

    def test_pad_rank_adds_trailing_ones(self):
        padded = TensorShape.of(3).pad_rank(3)
        assert padded.dims == (3, 1, 1)
        assert padded.strides == (1, 3, 3)
        assert padded.num_elements == 3

    def test_pad_rank_same_rank_is_noop(self):
        shape = TensorShape.of(3, 4)
        assert shape.pad_rank(2) == shape

    def test_pad_rank_cannot_shrink(self):
        with pytest.raises(ValueError):
            TensorShape.of(3, 4).pad_rank(1)

    def test_append_at_current_rank(self):
        shape = TensorShape.of(3, 4).append(2, 5)
        assert shape.dims == (3, 4, 5)
        assert shape.is_dense

    def test_append_beyond_rank_pads(self):
        shape = TensorShape.of(4).append(2, 7)
        assert shape.dims == (4, 1, 7)
        assert shape.is_dense

    def test_append_to_empty_shape(self):
        assert TensorShape().append(0, 6).dims == (6,)


class TestTensorShapeNarrowing:
    """Test narrowing to a sub-range and realizing views."""

    def test_full_narrow_is_identity(self):
        shape = TensorShape.of(3, 4, 5)
        assert shape.narrow_to((0, 0, 0), (3, 4, 5)) == shape

    def test_narrow_keeps_strides_and_moves_offset(self):
        narrowed = TensorShape.of(3, 4, 5).narrow_to((0, 1, 2), (3, 2, 4))
        assert narrowed.dims == (3, 1, 2)
        assert narrowed.strides == (1, 3, 12)
        assert narrowed.offset == 1 * 3 + 2 * 12
        assert not narrowed.is_dense

    def test_narrow_out_of_bounds(self):
        with pytest.raises(ValueError, match="out of bounds"):
            TensorShape.of(3, 4).narrow_to((0, 2), (3, 5))

    def test_narrow_rank_mismatch(self):
        with pytest.raises(ValueError):
            TensorShape.of(3, 4).narrow_to((0,), (3,))

    def test_as_strided_matches_fortran_order(self):
        """Verify a narrowed view indexes the same elements as numpy's F-order slice."""
        shape = TensorShape.of(3, 4, 5)
        storage = torch.arange(60, dtype=torch.float32)
        narrowed = shape.narrow_to((1, 0, 2), (3, 4, 3))

        view = narrowed.as_strided(storage)

        expected = np.arange(60, dtype=np.float32).reshape((3, 4, 5), order="F")[1:3, :, 2:3]
        assert tuple(view.shape) == (2, 4, 1)
        np.testing.assert_array_equal(view.numpy(), expected)

    def test_as_strided_is_a_view(self):
        storage = torch.zeros(12)
        view = TensorShape.of(3, 4).narrow_to((0, 1), (3, 2)).as_strided(storage)
        view.fill_(1.0)
        assert storage.sum().item() == 3.0
        assert storage[3:6].tolist() == [1.0, 1.0, 1.0]
