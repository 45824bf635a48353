"""Tests for fitness evaluation."""

import numpy as np
import pytest

from funcsynth import (
    EVALUATION_FUNCTIONS,
    WORST_FITNESS,
    ConfigurationError,
    Dataset,
    Evaluator,
    Expression,
    FunctionPalette,
    Individual,
    ProgramExecutor,
    codec,
    evaluate_per_byte,
    evaluate_per_value,
    make_dataset,
)

FUNCTION_NAME = "polynomialFitting"


def _with_body(program, function, operator):
    x, y = function.inputs[0].name, function.outputs[0].name
    program.replace_body(FUNCTION_NAME, [Expression(operator, [x, x], y)])
    return program


class TestPerByte:
    def test_exact_program_scores_zero(
        self, square_program, square_function, add_mul_palette, square_dataset
    ):
        program = _with_body(square_program, square_function, "f32.mul")
        executor = ProgramExecutor(add_mul_palette)
        assert evaluate_per_byte(program, FUNCTION_NAME, square_dataset, executor) == 0.0

    def test_sums_byte_differences(self, square_program, square_function, add_mul_palette):
        dataset = make_dataset(4, lambda x: x * x)
        program = _with_body(square_program, square_function, "f32.add")
        produced = codec.encode_array([0.0, 2.0, 4.0, 6.0], "f32")
        expected = sum(abs(a - b) for a, b in zip(produced, dataset.outputs[0]))

        fitness = evaluate_per_byte(program, FUNCTION_NAME, dataset, ProgramExecutor(add_mul_palette))
        assert fitness == float(expected)
        assert fitness > 0

    def test_sign_flip_costs_one_byte(self, square_program, square_function):
        dataset = Dataset.from_values([[1.0]], [[1.0]], ["f32"], ["f32"])
        x, y = square_function.inputs[0].name, square_function.outputs[0].name
        square_program.replace_body(FUNCTION_NAME, [Expression("f32.neg", [x], y)])
        executor = ProgramExecutor(FunctionPalette.from_names(["f32.neg"]))
        assert evaluate_per_byte(square_program, FUNCTION_NAME, dataset, executor) == 128.0

    def test_deterministic(self, square_program, square_function, add_mul_palette, square_dataset):
        program = _with_body(square_program, square_function, "f32.add")
        executor = ProgramExecutor(add_mul_palette)
        first = evaluate_per_byte(program, FUNCTION_NAME, square_dataset, executor)
        assert evaluate_per_byte(program, FUNCTION_NAME, square_dataset, executor) == first

    def test_failed_execution_scores_worst(self, square_program, add_mul_palette, square_dataset):
        executor = ProgramExecutor(add_mul_palette)
        assert evaluate_per_byte(square_program, FUNCTION_NAME, square_dataset, executor) == WORST_FITNESS

    def test_length_mismatch_scores_worst(self, square_program, square_function, add_mul_palette):
        dataset = Dataset.from_values([[0.0, 1.0, 2.0]], [[0.0, 1.0]], ["f32"], ["f32"])
        program = _with_body(square_program, square_function, "f32.mul")
        executor = ProgramExecutor(add_mul_palette)
        assert evaluate_per_byte(program, FUNCTION_NAME, dataset, executor) == WORST_FITNESS

    def test_worst_fitness_is_largest_double(self):
        assert WORST_FITNESS == np.finfo(np.float64).max


class TestPerValue:
    def test_sums_value_differences(self, square_program, square_function, add_mul_palette):
        dataset = make_dataset(4, lambda x: x * x)
        program = _with_body(square_program, square_function, "f32.add")
        executor = ProgramExecutor(add_mul_palette)
        assert evaluate_per_value(program, FUNCTION_NAME, dataset, executor) == 4.0

    def test_nan_scores_worst(self, square_program, square_function):
        dataset = make_dataset(3, lambda x: x)
        program = _with_body(square_program, square_function, "f32.div")
        executor = ProgramExecutor(FunctionPalette.from_names(["f32.div"]))
        assert evaluate_per_value(program, FUNCTION_NAME, dataset, executor) == WORST_FITNESS


class TestEvaluator:
    def test_evaluate_individual_caches_fitness(
        self, square_program, square_function, add_mul_palette, square_dataset
    ):
        program = _with_body(square_program, square_function, "f32.mul")
        evaluator = Evaluator(square_dataset, ProgramExecutor(add_mul_palette), FUNCTION_NAME)
        individual = Individual(program, FUNCTION_NAME)
        assert not individual.evaluated
        assert evaluator.evaluate_individual(individual) == 0.0
        assert individual.fitness == 0.0

    def test_strategies(self):
        assert set(EVALUATION_FUNCTIONS) == {"per_byte", "per_value"}

    def test_unknown_strategy(self, add_mul_palette, square_dataset):
        with pytest.raises(ConfigurationError, match="Unknown evaluation"):
            Evaluator(square_dataset, ProgramExecutor(add_mul_palette), FUNCTION_NAME, "squared")
