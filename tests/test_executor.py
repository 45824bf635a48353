"""Tests for program execution."""

import numpy as np
import pytest

from funcsynth import (
    ExecutionError,
    Expression,
    FunctionPalette,
    ProgramExecutor,
    codec,
)

FUNCTION_NAME = "polynomialFitting"


def _square(program, function):
    x, y = function.inputs[0].name, function.outputs[0].name
    program.replace_body(FUNCTION_NAME, [Expression("f32.mul", [x, x], y)])
    return x, y


class TestProgramExecutor:
    def test_exact_program_reproduces_dataset(
        self, square_program, square_function, add_mul_palette, square_dataset
    ):
        _square(square_program, square_function)
        outputs = ProgramExecutor(add_mul_palette).execute(
            square_program, FUNCTION_NAME, square_dataset.inputs
        )
        assert outputs == list(square_dataset.outputs)

    def test_execute_values(self, square_program, square_function, add_mul_palette):
        _square(square_program, square_function)
        (ys,) = ProgramExecutor(add_mul_palette).execute_values(
            square_program, FUNCTION_NAME, [[1.5, -2.0]]
        )
        assert ys.tolist() == [2.25, 4.0]

    def test_custom_operation(self, square_program, square_function):
        palette = FunctionPalette()
        palette.register("affine", 2, "f32", "f32", lambda a, b: a * 2 + b)
        x, y = square_function.inputs[0].name, square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("affine", [x, x], y)])
        (ys,) = ProgramExecutor(palette).execute_values(square_program, FUNCTION_NAME, [[1.0, 2.0]])
        assert ys.tolist() == [3.0, 6.0]

    def test_custom_scalar_result_is_broadcast(self, square_program, square_function):
        palette = FunctionPalette()
        palette.register("one", 1, "f32", "f32", lambda a: 1.0)
        x, y = square_function.inputs[0].name, square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("one", [x], y)])
        (ys,) = ProgramExecutor(palette).execute_values(square_program, FUNCTION_NAME, [[5.0, 6.0, 7.0]])
        assert ys.tolist() == [1.0, 1.0, 1.0]

    def test_domain_errors_do_not_raise(self, square_program, square_function):
        palette = FunctionPalette.from_names(["f32.div"])
        x, y = square_function.inputs[0].name, square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("f32.div", [x, x], y)])
        (ys,) = ProgramExecutor(palette).execute_values(square_program, FUNCTION_NAME, [[0.0, 2.0]])
        assert np.isnan(ys[0])
        assert ys[1] == 1.0

    def test_unassigned_output(self, square_program, square_function, add_mul_palette):
        x = square_function.inputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("f32.mul", [x, x], "evo_tmp_0")])
        with pytest.raises(ExecutionError, match="never assigned"):
            ProgramExecutor(add_mul_palette).execute(
                square_program, FUNCTION_NAME, [codec.encode_array([1.0], "f32")]
            )

    def test_empty_body_fails(self, square_program, add_mul_palette, square_dataset):
        with pytest.raises(ExecutionError):
            ProgramExecutor(add_mul_palette).execute(square_program, FUNCTION_NAME, square_dataset.inputs)

    def test_unknown_operator(self, square_program, square_function):
        _square(square_program, square_function)
        executor = ProgramExecutor(FunctionPalette.from_names(["f32.add"]))
        with pytest.raises(ExecutionError, match="Unknown operator"):
            executor.execute(square_program, FUNCTION_NAME, [codec.encode_array([1.0], "f32")])

    def test_undefined_operand(self, square_program, square_function, add_mul_palette):
        y = square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("f32.mul", ["ghost", "ghost"], y)])
        with pytest.raises(ExecutionError, match="not defined"):
            ProgramExecutor(add_mul_palette).execute(
                square_program, FUNCTION_NAME, [codec.encode_array([1.0], "f32")]
            )

    def test_input_count_mismatch(self, square_program, square_function, add_mul_palette):
        _square(square_program, square_function)
        buffer = codec.encode_array([1.0], "f32")
        with pytest.raises(ExecutionError, match="takes 1 inputs"):
            ProgramExecutor(add_mul_palette).execute(square_program, FUNCTION_NAME, [buffer, buffer])

    def test_partial_buffer(self, square_program, square_function, add_mul_palette):
        _square(square_program, square_function)
        with pytest.raises(ExecutionError):
            ProgramExecutor(add_mul_palette).execute(square_program, FUNCTION_NAME, [b"\x00" * 5])

    def test_missing_function(self, square_program, add_mul_palette):
        with pytest.raises(ExecutionError):
            ProgramExecutor(add_mul_palette).execute(square_program, "nope", [])

    def test_raising_operation(self, square_program, square_function):
        def explode(a):
            raise RuntimeError("boom")

        palette = FunctionPalette()
        palette.register("explode", 1, "f32", "f32", explode)
        x, y = square_function.inputs[0].name, square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("explode", [x], y)])
        with pytest.raises(ExecutionError, match="boom"):
            ProgramExecutor(palette).execute(
                square_program, FUNCTION_NAME, [codec.encode_array([1.0], "f32")]
            )
