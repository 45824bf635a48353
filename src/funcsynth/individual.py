"""Individuals: one program plus its cached fitness."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .program import Expression, Function, Program


class Individual:
    """
    One candidate solution. Cloning deep-copies the program, so an
    individual can be mutated without disturbing its parents.
    """

    def __init__(
        self,
        program: Program,
        function_name: str,
        fitness: Optional[float] = None,
        generation: int = 0,
    ):
        self.program = program
        self.function_name = function_name
        self.fitness = fitness
        self.generation = generation

    @property
    def function(self) -> Function:
        return self.program.get_function(self.function_name)

    @property
    def body(self) -> List[Expression]:
        return self.function.expressions

    @property
    def evaluated(self) -> bool:
        return self.fitness is not None

    def clone(self) -> "Individual":
        return Individual(
            self.program.clone(),
            self.function_name,
            fitness=self.fitness,
            generation=self.generation,
        )

    def replace_body(self, expressions: Iterable[Expression]) -> None:
        """Swap the evolved body in place; the cached fitness is discarded."""
        self.program.replace_body(self.function_name, expressions)
        self.fitness = None

    def get_signature(self) -> str:
        return self.program.get_signature(self.function_name)

    def to_human_readable(self) -> List[str]:
        return self.program.to_human_readable(self.function_name)

    def __repr__(self) -> str:
        return (
            f"Individual({self.function_name}, {len(self.body)} expressions, "
            f"fitness={self.fitness})"
        )


__all__ = ["Individual"]
