"""Fitness evaluation of programs against serialized datasets."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

import numpy as np

from . import codec
from .dataset import Dataset
from .errors import ConfigurationError, ExecutionError
from .executor import ProgramExecutor
from .individual import Individual
from .program import Program

logger = logging.getLogger(__name__)

# Assigned to programs that cannot run or produce malformed output.
WORST_FITNESS = float(np.finfo(np.float64).max)


def _run(
    program: Program,
    function_name: str,
    dataset: Dataset,
    executor: ProgramExecutor,
) -> Optional[List[bytes]]:
    try:
        produced = executor.execute(program, function_name, dataset.inputs)
    except ExecutionError as exc:
        logger.debug("Execution of '%s' failed: %s", function_name, exc)
        return None
    if len(produced) != len(dataset.outputs):
        return None
    if any(len(got) != len(expected) for got, expected in zip(produced, dataset.outputs)):
        return None
    return produced


def evaluate_per_byte(
    program: Program,
    function_name: str,
    dataset: Dataset,
    executor: ProgramExecutor,
) -> float:
    """
    Sum of absolute differences between produced and expected bytes,
    over every byte of every output channel. 0 means byte-identical.

    This compares raw encodings, not decoded values: a difference in a
    sign or exponent byte weighs far more than one in a low mantissa byte.
    """
    produced = _run(program, function_name, dataset, executor)
    if produced is None:
        return WORST_FITNESS

    total = 0
    for got, expected in zip(produced, dataset.outputs):
        got_bytes = np.frombuffer(got, dtype=np.uint8).astype(np.int64)
        expected_bytes = np.frombuffer(expected, dtype=np.uint8).astype(np.int64)
        total += int(np.abs(got_bytes - expected_bytes).sum())
    return float(total)


def evaluate_per_value(
    program: Program,
    function_name: str,
    dataset: Dataset,
    executor: ProgramExecutor,
) -> float:
    """Sum of absolute differences between decoded produced and expected values."""
    produced = _run(program, function_name, dataset, executor)
    if produced is None:
        return WORST_FITNESS

    total = 0.0
    with np.errstate(all="ignore"):
        for got, expected, dtype in zip(produced, dataset.outputs, dataset.output_types):
            got_values = codec.decode(got, dtype).astype(np.float64)
            expected_values = codec.decode(expected, dtype).astype(np.float64)
            total += float(np.abs(got_values - expected_values).sum())
    if not np.isfinite(total) or total > WORST_FITNESS:
        return WORST_FITNESS
    return total


EvaluationFunction = Callable[[Program, str, Dataset, ProgramExecutor], float]

EVALUATION_FUNCTIONS: Dict[str, EvaluationFunction] = {
    "per_byte": evaluate_per_byte,
    "per_value": evaluate_per_value,
}


class Evaluator:
    """Scores programs against one dataset with a chosen error metric."""

    def __init__(
        self,
        dataset: Dataset,
        executor: ProgramExecutor,
        function_name: str,
        strategy: str = "per_byte",
    ):
        if strategy not in EVALUATION_FUNCTIONS:
            raise ConfigurationError(
                f"Unknown evaluation '{strategy}'. Use one of {sorted(EVALUATION_FUNCTIONS)}."
            )
        self.dataset = dataset
        self.executor = executor
        self.function_name = function_name
        self.strategy = strategy
        self._evaluate = EVALUATION_FUNCTIONS[strategy]

    def evaluate(self, program: Program) -> float:
        return self._evaluate(program, self.function_name, self.dataset, self.executor)

    def evaluate_individual(self, individual: Individual) -> float:
        """Score ``individual`` and cache the result on it."""
        individual.fitness = self.evaluate(individual.program)
        return individual.fitness


__all__ = [
    "WORST_FITNESS",
    "evaluate_per_byte",
    "evaluate_per_value",
    "EVALUATION_FUNCTIONS",
    "Evaluator",
]
