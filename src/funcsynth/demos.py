"""Example workflows preserved for quick experimentation."""

from __future__ import annotations

from typing import Optional

from .config import EvolutionConfig
from .dataset import make_dataset
from .executor import ProgramExecutor
from .palette import FunctionPalette
from .population import Population, RunResult
from .skeleton import make_initial_program


def volume(inp1, inp2, inp3):
    """Data model with three inputs and two outputs."""
    return (
        inp1 * inp1 + inp2 * inp2 + inp3 * inp3,
        inp1 * inp2 + inp2 * inp3 + inp3 * inp1,
    )


def _report(config: EvolutionConfig, result: RunResult) -> None:
    print(f"\n=== Best Program ({result.reason.value}) ===")
    print(f"Fitness: {result.fitness:.4f}")
    print(f"Generations: {result.generations}")
    for line in result.best_program.to_human_readable(config.function_to_evolve):
        print(f"  {line}")


def example_polynomial_fitting(seed: Optional[int] = None) -> RunResult:
    """Example: discover x*x from 20 samples."""
    print("=== Polynomial Fitting ===\n")

    config = EvolutionConfig(
        population_size=20,
        iterations=500,
        target_error=5.0,
        expressions_count=4,
        function_to_evolve="polynomialFitting",
        input_signature=("f32",),
        output_signature=("f32",),
        function_set=("f32.add", "f32.mul"),
        seed=seed,
    )
    dataset = make_dataset(20, lambda x: x * x, config.input_signature, config.output_signature)
    program = make_initial_program(
        config.function_to_evolve, config.input_signature, config.output_signature
    )

    def progress_callback(gen, best, best_fitness):
        if gen % 50 == 0:
            print(f"Generation {gen}: best fitness {best_fitness:.4f}")

    population = Population(config, progress_callback=progress_callback)
    population.initialize(program, dataset)
    result = population.evolve()
    _report(config, result)

    print("\n=== Testing Program ===")
    executor = ProgramExecutor(population.palette)
    xs = [0.0, 1.0, 3.0, 7.5]
    (ys,) = executor.execute_values(result.best_program, config.function_to_evolve, [xs])
    for x, y in zip(xs, ys):
        print(f"  x={x}: Result={y:.2f}, Expected={x * x:.2f}")
    return result


def example_volume(seed: Optional[int] = None) -> RunResult:
    """Example: two outputs over three inputs, using the full f32 palette."""
    print("=== Volume ===\n")

    config = EvolutionConfig(
        population_size=100,
        iterations=300,
        target_error=0.1,
        expressions_count=8,
        function_to_evolve="volume",
        input_signature=("f32", "f32", "f32"),
        output_signature=("f32", "f32"),
        seed=seed,
    )
    dataset = make_dataset(100, volume, config.input_signature, config.output_signature)
    program = make_initial_program(
        config.function_to_evolve, config.input_signature, config.output_signature
    )

    palette = FunctionPalette.from_names(config.function_set)
    population = Population(config).initialize(program, dataset, palette)
    result = population.evolve()
    _report(config, result)
    return result


__all__ = ["volume", "example_polynomial_fitting", "example_volume"]
