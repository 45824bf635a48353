"""Shared fixtures for the funcsynth tests."""

import pytest

from funcsynth import FunctionPalette, make_dataset, make_initial_program

FUNCTION_NAME = "polynomialFitting"


@pytest.fixture
def square_program():
    """Seed program for a (f32) -> (f32) function with an empty body."""
    return make_initial_program(FUNCTION_NAME, ["f32"], ["f32"])


@pytest.fixture
def square_function(square_program):
    return square_program.get_function(FUNCTION_NAME)


@pytest.fixture
def add_mul_palette():
    return FunctionPalette.from_names(["f32.add", "f32.mul"])


@pytest.fixture
def square_dataset():
    """Ten samples of x -> x*x."""
    return make_dataset(10, lambda x: x * x)
