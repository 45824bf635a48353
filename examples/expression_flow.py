#!/usr/bin/env python3
"""
Demonstrate registering a custom operation, building a body by hand,
validating it and executing it.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
if SRC_PATH.exists() and str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from funcsynth import (
    BodyValidator,
    Expression,
    FunctionPalette,
    ProgramExecutor,
    make_initial_program,
)


def affine_bias(value, bias):
    """Scale the first operand then add the second."""
    return value * 1.25 + bias


def main() -> None:
    palette = FunctionPalette.from_names(["f32.mul", "f32.add"])
    palette.register(
        "affine_bias",
        arity=2,
        operand_type="f32",
        result_type="f32",
        function=affine_bias,
        doc="Scales the first source then adds the second.",
    )

    program = make_initial_program("square_bias", ["f32"], ["f32"])
    function = program.get_function("square_bias")
    x = function.inputs[0].name
    y = function.outputs[0].name

    body = [
        Expression("f32.mul", [x, x], "evo_tmp_0"),
        Expression("affine_bias", ["evo_tmp_0", x], y),
        Expression("f32.add", [x, x], "evo_tmp_2"),
    ]
    BodyValidator(palette).validate(function, body)
    program.replace_body("square_bias", body)

    executor = ProgramExecutor(palette)
    xs = [-1.0, 0.5, 3.0]
    (ys,) = executor.execute_values(program, "square_bias", [xs])
    for value, result in zip(xs, ys):
        print(f"x={value:+.1f} -> y={result:.4f}")

    print("Human-readable trace:")
    for line in program.to_human_readable("square_bias"):
        print(" ", line)


if __name__ == "__main__":
    main()
