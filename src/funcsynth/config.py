"""Run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .crossover import CROSSOVER_FUNCTIONS
from .enums import PrimitiveType
from .errors import ConfigurationError
from .evaluation import EVALUATION_FUNCTIONS

DEFAULT_FUNCTION_SET: Tuple[str, ...] = (
    "f32.add",
    "f32.mul",
    "f32.sub",
    "f32.div",
    "f32.neg",
    "f32.abs",
    "f32.pow",
    "f32.cos",
    "f32.sin",
    "f32.acos",
    "f32.asin",
    "f32.sqrt",
    "f32.log",
)

SELECTION_POLICIES: Tuple[str, ...] = ("uniform", "proportional", "tournament")


@dataclass(frozen=True)
class EvolutionConfig:
    """Configuration for one evolutionary run. Validated on construction."""

    population_size: int = 100
    iterations: int = 10000
    target_error: float = 0.1
    expressions_count: int = 4
    function_to_evolve: str = "polynomialFitting"
    input_signature: Tuple[str, ...] = ("f32", "f32")
    output_signature: Tuple[str, ...] = ("f32",)
    function_set: Tuple[str, ...] = field(default=DEFAULT_FUNCTION_SET)
    crossover: str = "single_point"
    evaluation: str = "per_byte"
    selection: str = "uniform"
    mutation_rate: float = 0.1
    max_crossover_attempts: int = 10
    workers: int = 1
    seed: Optional[int] = None
    log_interval: int = 10

    def __post_init__(self):
        for name in ("input_signature", "output_signature", "function_set"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value))

        for name in ("population_size", "iterations", "expressions_count", "workers", "log_interval"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}.")
        if self.max_crossover_attempts < 0:
            raise ConfigurationError("max_crossover_attempts cannot be negative.")
        if not self.target_error >= 0:
            raise ConfigurationError(f"target_error must be non-negative, got {self.target_error!r}.")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be within [0, 1], got {self.mutation_rate!r}.")
        if not self.function_to_evolve or not self.function_to_evolve.strip():
            raise ConfigurationError("function_to_evolve must be a non-empty string.")
        if not self.input_signature:
            raise ConfigurationError("input_signature must list at least one type.")
        if not self.output_signature:
            raise ConfigurationError("output_signature must list at least one type.")
        for type_name in self.input_signature + self.output_signature:
            PrimitiveType.parse(type_name)
        if not self.function_set:
            raise ConfigurationError("function_set must list at least one operation.")
        if self.crossover not in CROSSOVER_FUNCTIONS:
            raise ConfigurationError(
                f"Unknown crossover '{self.crossover}'. Use one of {sorted(CROSSOVER_FUNCTIONS)}."
            )
        if self.evaluation not in EVALUATION_FUNCTIONS:
            raise ConfigurationError(
                f"Unknown evaluation '{self.evaluation}'. Use one of {sorted(EVALUATION_FUNCTIONS)}."
            )
        if self.selection not in SELECTION_POLICIES:
            raise ConfigurationError(
                f"Unknown selection '{self.selection}'. Use one of {list(SELECTION_POLICIES)}."
            )

    @property
    def input_types(self) -> Tuple[PrimitiveType, ...]:
        return tuple(PrimitiveType.parse(t) for t in self.input_signature)

    @property
    def output_types(self) -> Tuple[PrimitiveType, ...]:
        return tuple(PrimitiveType.parse(t) for t in self.output_signature)


__all__ = ["DEFAULT_FUNCTION_SET", "SELECTION_POLICIES", "EvolutionConfig"]
