"""Population manager: the generational evolution loop."""

from __future__ import annotations

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from .builder import ExpressionBuilder
from .config import EvolutionConfig
from .crossover import CROSSOVER_FUNCTIONS
from .dataset import Dataset
from .enums import PopulationState, TerminationReason
from .errors import ConfigurationError, StructuralMutationError
from .evaluation import WORST_FITNESS, Evaluator
from .executor import ProgramExecutor
from .individual import Individual
from .mutation import mutate
from .palette import FunctionPalette
from .program import Function, Program
from .validator import BodyValidator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Individual, float], None]


def _mean(values: List[float]) -> float:
    """Mean of finite scores; WORST_FITNESS when there are none."""
    if not values:
        return WORST_FITNESS
    total = sum(values)
    if math.isfinite(total):
        return total / len(values)
    return min(sum(v / len(values) for v in values), WORST_FITNESS)


@dataclass(frozen=True)
class GenerationStats:
    """
    Summary of one evaluated generation. ``mean_fitness`` averages the
    individuals that ran; ``failed_programs`` counts those scored
    ``WORST_FITNESS``.
    """

    generation: int
    best_fitness: float
    mean_fitness: float
    unique_programs: int
    failed_programs: int = 0


@dataclass(frozen=True)
class RunResult:
    """Outcome of an evolutionary run."""

    best_program: Program
    fitness: float
    generations: int
    reason: TerminationReason

    @property
    def converged(self) -> bool:
        return self.reason == TerminationReason.CONVERGED


class Population:
    """
    Fixed-size population evolved generation by generation.

    Lifecycle: UNINITIALIZED -> INITIALIZED (``initialize``) -> EVOLVING
    (``evolve`` / ``step``) -> CONVERGED or EXHAUSTED.
    The best individual seen so far is kept as an independent copy and
    carried unchanged into every new generation.
    """

    def __init__(
        self,
        config: EvolutionConfig,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.progress_callback = progress_callback
        self.state = PopulationState.UNINITIALIZED
        self.individuals: List[Individual] = []
        self.best: Optional[Individual] = None
        self.generation = 0
        self.history: List[GenerationStats] = []
        self.rng = random.Random(config.seed)
        self.palette: Optional[FunctionPalette] = None
        self.dataset: Optional[Dataset] = None
        self.executor: Optional[ProgramExecutor] = None
        self.evaluator: Optional[Evaluator] = None
        self._crossover = CROSSOVER_FUNCTIONS[config.crossover]
        self._pool: Optional[ThreadPoolExecutor] = None

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    @property
    def function_name(self) -> str:
        return self.config.function_to_evolve

    def initialize(
        self,
        seed_program: Program,
        dataset: Dataset,
        palette: Optional[FunctionPalette] = None,
    ) -> "Population":
        """
        Attach dataset and palette and fill the population from the seed.

        Each individual is a clone of ``seed_program`` with a random body of
        ``len(outputs)``..``expressions_count`` palette expressions. A
        non-empty seed body is kept as-is for the first individual.
        """
        if self.state != PopulationState.UNINITIALIZED:
            raise ConfigurationError("Population is already initialized.")

        name = self.function_name
        if not seed_program.has_function(name):
            raise ConfigurationError(f"Seed program has no function named '{name}'.")
        function = seed_program.get_function(name)
        if tuple(function.input_types) != self.config.input_types:
            raise ConfigurationError(f"Inputs of '{name}' do not match the input signature.")
        if tuple(function.output_types) != self.config.output_types:
            raise ConfigurationError(f"Outputs of '{name}' do not match the output signature.")
        if dataset.input_types != self.config.input_types:
            raise ConfigurationError("Dataset inputs do not match the input signature.")
        if dataset.output_types != self.config.output_types:
            raise ConfigurationError("Dataset outputs do not match the output signature.")
        if dataset.sample_count != dataset.output_sample_count:
            raise ConfigurationError("Dataset inputs and outputs hold different sample counts.")

        if self.config.expressions_count < len(function.outputs):
            raise ConfigurationError(
                f"expressions_count {self.config.expressions_count} cannot assign "
                f"{len(function.outputs)} outputs of '{name}'."
            )

        if palette is None:
            palette = FunctionPalette.from_names(self.config.function_set)
        self._attach_palette(palette, function)

        seed_body = function.expressions
        if seed_body:
            try:
                BodyValidator(palette).validate(
                    function, seed_body, self.config.expressions_count
                )
            except StructuralMutationError as exc:
                raise ConfigurationError(f"Seed body of '{name}' is invalid: {exc}") from exc

        self.dataset = dataset
        self.executor = ProgramExecutor(palette)
        self.evaluator = Evaluator(dataset, self.executor, name, self.config.evaluation)

        builder = ExpressionBuilder(palette, self.rng)
        seed = Individual(seed_program.clone(), name)
        self.individuals = []
        for idx in range(self.config.population_size):
            individual = seed.clone()
            if idx > 0 or not seed_body:
                try:
                    body = builder.random_size_body(
                        individual.function, self.config.expressions_count
                    )
                except StructuralMutationError as exc:
                    raise ConfigurationError(
                        f"Cannot generate bodies for '{name}': {exc}"
                    ) from exc
                individual.replace_body(body)
            self.individuals.append(individual)

        self.state = PopulationState.INITIALIZED
        logger.info(
            "Initialized %d individuals for '%s' with %d palette operations",
            len(self.individuals),
            name,
            len(palette),
        )
        return self

    def _attach_palette(self, palette: FunctionPalette, function: Function) -> None:
        if len(palette) == 0:
            raise ConfigurationError("Function palette is empty.")
        if not palette.entries(operand_types=set(function.input_types)):
            raise ConfigurationError("No palette operation reads the input types.")
        for dtype in function.output_types:
            if not palette.entries(result_type=dtype):
                raise ConfigurationError(
                    f"No palette operation produces {dtype.type_name} for the outputs."
                )

        if palette.frozen:
            if palette.target_function != function.name:
                raise ConfigurationError(
                    f"Frozen palette targets '{palette.target_function}', not '{function.name}'."
                )
        else:
            palette.set_target_function(function.name)
            palette.freeze()
        self.palette = palette

    def evolve(self) -> RunResult:
        """
        Run generations until an individual reaches the target error or
        the iteration budget is spent.
        """
        if self.state == PopulationState.UNINITIALIZED:
            raise ConfigurationError("Population must be initialized before evolving.")
        if self.state in (PopulationState.CONVERGED, PopulationState.EXHAUSTED):
            raise ConfigurationError("Population has already finished evolving.")

        logger.info("Starting evolution for %d iterations", self.config.iterations)
        workers = self.config.workers
        self._pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        try:
            reason = None
            while reason is None:
                reason = self.step()
        finally:
            if self._pool is not None:
                self._pool.shutdown()
                self._pool = None

        return self.result()

    def step(self) -> Optional[TerminationReason]:
        """
        Run one generation: evaluate, keep the best, check termination and,
        unless finished, breed the replacement generation.
        Returns the termination reason once the run is over.
        """
        if self.state == PopulationState.UNINITIALIZED:
            raise ConfigurationError("Population must be initialized before evolving.")
        if self.state in (PopulationState.CONVERGED, PopulationState.EXHAUSTED):
            return self.termination_reason
        self.state = PopulationState.EVOLVING

        self._evaluate_pending()
        self._update_best()
        self._record_generation()
        self.generation += 1

        if self.best.fitness <= self.config.target_error:
            self.state = PopulationState.CONVERGED
            logger.info(
                "Converged after %d generations: fitness=%.4f",
                self.generation,
                self.best.fitness,
            )
            return TerminationReason.CONVERGED
        if self.generation >= self.config.iterations:
            self.state = PopulationState.EXHAUSTED
            logger.info(
                "Exhausted %d generations: best fitness=%.4f",
                self.generation,
                self.best.fitness,
            )
            return TerminationReason.EXHAUSTED

        self.individuals = self._next_generation()
        return None

    @property
    def termination_reason(self) -> Optional[TerminationReason]:
        if self.state == PopulationState.CONVERGED:
            return TerminationReason.CONVERGED
        if self.state == PopulationState.EXHAUSTED:
            return TerminationReason.EXHAUSTED
        return None

    def result(self) -> RunResult:
        reason = self.termination_reason
        if reason is None:
            raise ConfigurationError("Population has not finished evolving.")
        return RunResult(
            best_program=self.best.program.clone(),
            fitness=self.best.fitness,
            generations=self.generation,
            reason=reason,
        )

    def _evaluate_pending(self) -> None:
        pending = [ind for ind in self.individuals if ind.fitness is None]
        if self._pool is not None and len(pending) > 1:
            scores = list(self._pool.map(self.evaluator.evaluate, [ind.program for ind in pending]))
            for individual, score in zip(pending, scores):
                individual.fitness = score
        else:
            for individual in pending:
                self.evaluator.evaluate_individual(individual)

    def _update_best(self) -> None:
        current = min(self.individuals, key=lambda ind: ind.fitness)
        if self.best is None or current.fitness < self.best.fitness:
            self.best = current.clone()

    def _record_generation(self) -> None:
        scored = [ind.fitness for ind in self.individuals if ind.fitness < WORST_FITNESS]
        stats = GenerationStats(
            generation=self.generation,
            best_fitness=self.best.fitness,
            mean_fitness=_mean(scored),
            unique_programs=len({ind.get_signature() for ind in self.individuals}),
            failed_programs=len(self.individuals) - len(scored),
        )
        self.history.append(stats)

        if self.progress_callback:
            self.progress_callback(self.generation, self.best, self.best.fitness)

        if self.generation % self.config.log_interval == 0:
            logger.info(
                "Gen %03d: Best Fitness=%.4f, Effective Size=%d/%d, Unique=%d",
                self.generation,
                self.best.fitness,
                len(self.best.function.effective_indices()),
                len(self.best.body),
                stats.unique_programs,
            )

    def _next_generation(self) -> List[Individual]:
        size = self.config.population_size
        new_population = [self.best.clone()]

        while len(new_population) < size:
            parent1 = self._select()
            parent2 = self._select()
            children = self._crossover(
                parent1,
                parent2,
                self.palette,
                self.config.expressions_count,
                self.rng,
                max_attempts=self.config.max_crossover_attempts,
                both=size - len(new_population) >= 2,
            )
            for child in children:
                if self.rng.random() < self.config.mutation_rate:
                    child = mutate(child, self.palette, self.config.expressions_count, self.rng)
                child.generation = self.generation
                new_population.append(child)

        return new_population[:size]

    def _select(self) -> Individual:
        policy = self.config.selection
        if policy == "proportional":
            weights = [1.0 / (1.0 + ind.fitness) for ind in self.individuals]
            return self.rng.choices(self.individuals, weights=weights)[0]
        if policy == "tournament":
            return self._tournament_select()
        return self.rng.choice(self.individuals)

    def _tournament_select(self, tournament_size: int = 3) -> Individual:
        """Tournament selection."""
        tournament = self.rng.sample(
            self.individuals, min(tournament_size, len(self.individuals))
        )
        return min(tournament, key=lambda ind: ind.fitness)


__all__ = ["GenerationStats", "RunResult", "Population"]
