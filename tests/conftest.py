"""Pytest configuration and shared fixtures for graphshape tests."""

import pytest

from graphshape import ComputationNetwork, MBLayout


@pytest.fixture
def layout():
    """Create a layout of 2 parallel sequences with 3 time steps."""
    return MBLayout(num_parallel_sequences=2, num_time_steps=3)


@pytest.fixture
def other_layout():
    """Create a layout with the same sizes as ``layout`` but a different identity."""
    return MBLayout(num_parallel_sequences=2, num_time_steps=3)


@pytest.fixture
def network():
    """Create an empty network whose shared layout has 2 sequences x 3 steps."""
    return ComputationNetwork(num_parallel_sequences=2, num_time_steps=3)
