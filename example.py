"""Example workflow: evolve a program reproducing the ``volume`` data model."""

import logging
import sys

from funcsynth import (
    EvolutionConfig,
    FunctionPalette,
    Population,
    ProgramExecutor,
    make_dataset,
    make_initial_program,
)
from funcsynth.demos import example_polynomial_fitting, volume


def main(seed=None):
    # How big the data model is and which function set evolution may use.
    config = EvolutionConfig(
        population_size=100,
        iterations=10000,
        target_error=0.1,
        expressions_count=4,
        function_to_evolve="polynomialFitting",
        input_signature=("f32", "f32", "f32"),
        output_signature=("f32", "f32"),
        seed=seed,
        log_interval=100,
    )

    program = make_initial_program(
        config.function_to_evolve, config.input_signature, config.output_signature
    )
    dataset = make_dataset(100, volume, config.input_signature, config.output_signature)
    palette = FunctionPalette.from_names(config.function_set)

    population = Population(config).initialize(program, dataset, palette)
    result = population.evolve()

    print(f"\nTermination: {result.reason.value} after {result.generations} generations")
    print("Best fitness:", result.fitness)
    print("\nEffective expression trace:")
    for line in result.best_program.to_human_readable(config.function_to_evolve):
        if line.startswith("✓"):
            print("  " + line)

    executor = ProgramExecutor(palette)
    print("\nSpot-check predictions:")
    for x in [2.0, 5.0, 9.0]:
        predicted = executor.execute_values(
            result.best_program, config.function_to_evolve, [[x], [x], [x]]
        )
        expected = volume(x, x, x)
        print(
            f"  x={x:.1f} | predicted={[float(p[0]) for p in predicted]} "
            f"| expected={list(expected)}"
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else "volume"
    if mode == "polynomial":
        example_polynomial_fitting()
    elif mode == "both":
        example_polynomial_fitting()
        main()
    else:
        main()
