"""Construction of the seed program every individual is cloned from."""

from __future__ import annotations

import itertools
from typing import Iterable, Union

from .enums import PrimitiveType
from .errors import ConfigurationError
from .program import MAIN_FUNC, Function, Parameter, Program

_gensym_counter = itertools.count()


def make_gensym(prefix: str) -> str:
    """Return a process-wide unique symbol starting with ``prefix``."""
    return f"{prefix}_{next(_gensym_counter)}"


def make_initial_program(
    function_name: str,
    input_signature: Iterable[Union[str, PrimitiveType]],
    output_signature: Iterable[Union[str, PrimitiveType]],
) -> Program:
    """
    Build a minimal runnable program: an empty ``main`` entry function and
    the function to evolve with the requested signature and an empty body.

    Args:
        function_name: Name of the function whose body will be evolved
        input_signature: Type names of the inputs, e.g. ``["f32", "f32"]``
        output_signature: Type names of the outputs, e.g. ``["f32"]``
    Returns:
        The new Program
    """
    if not function_name or not function_name.strip():
        raise ConfigurationError("Function to evolve must have a non-empty name.")
    if function_name == MAIN_FUNC:
        raise ConfigurationError(f"Function to evolve cannot be named '{MAIN_FUNC}'.")

    input_types = [PrimitiveType.parse(t) for t in input_signature]
    output_types = [PrimitiveType.parse(t) for t in output_signature]

    program = Program(entry=MAIN_FUNC)
    program.add_function(Function(MAIN_FUNC))

    to_evolve = program.add_function(Function(function_name))
    for dtype in input_types:
        to_evolve.add_input(Parameter(make_gensym("evo_inp"), dtype))
    for dtype in output_types:
        to_evolve.add_output(Parameter(make_gensym("evo_out"), dtype))

    return program


__all__ = ["make_gensym", "make_initial_program"]
