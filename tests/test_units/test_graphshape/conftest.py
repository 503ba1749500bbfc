"""Shared fixtures for graphshape unit tests.

This module provides:
- Factories for flat and sequence inputs
- A factory for unsized learnable parameters
"""

import pytest

from graphshape import InputValue, LearnableParameter


@pytest.fixture
def flat_input():
    """Factory for inputs without a layout."""

    def _make(name, shape, num_cols=1):
        return InputValue(name, tuple(shape), num_cols=num_cols)

    return _make


@pytest.fixture
def sequence_input(layout):
    """Factory for inputs sharing the ``layout`` fixture."""

    def _make(name, shape, node_layout=None):
        return InputValue(name, tuple(shape), layout=node_layout or layout)

    return _make


@pytest.fixture
def unsized_parameter():
    """Factory for parameters whose dimensions are left to inference."""

    def _make(name="W", init_method="uniform"):
        return LearnableParameter(name, init_method=init_method)

    return _make
