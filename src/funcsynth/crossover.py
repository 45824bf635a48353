"""Crossover operators."""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional

from .builder import ExpressionBuilder
from .errors import StructuralMutationError
from .individual import Individual
from .palette import FunctionPalette
from .validator import BodyValidator

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


def try_recombine(
    parent1: Individual,
    parent2: Individual,
    validator: BodyValidator,
    max_expressions: int,
    rng: random.Random,
    *,
    both: bool = False,
) -> List[Individual]:
    """
    One single-point recombination attempt.

    The child takes ``parent1``'s expressions before its cut followed by
    ``parent2``'s expressions from its cut onward, truncated to
    ``max_expressions``. With ``both`` the complementary child is built too.
    If one parent has an empty body, every child inherits the other
    parent's whole body.
    Raises StructuralMutationError if a child body is not valid.
    """
    body1, body2 = parent1.body, parent2.body
    if not body1 or not body2:
        bodies = [body1 or body2] * (2 if both else 1)
    else:
        cut1, cut2 = rng.randint(0, len(body1)), rng.randint(0, len(body2))
        bodies = [body1[:cut1] + body2[cut2:]]
        if both:
            bodies.append(body2[:cut2] + body1[cut1:])

    children = []
    for skeleton, body in zip((parent1, parent2), bodies):
        body = body[:max_expressions]
        validator.validate(skeleton.function, body, max_expressions)
        child = skeleton.clone()
        child.replace_body(body)
        children.append(child)
    return children


def crossover_single_point(
    parent1: Individual,
    parent2: Individual,
    palette: FunctionPalette,
    max_expressions: int,
    rng: Optional[random.Random] = None,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    both: bool = False,
) -> List[Individual]:
    """
    Single-point crossover that always yields valid children.

    Invalid splices are retried with fresh cut points up to ``max_attempts``
    times; after that each child gets a freshly generated palette body.
    Parents are never modified.
    """
    rng = rng or random.Random()
    validator = BodyValidator(palette)

    last_error: Optional[StructuralMutationError] = None
    for _ in range(max_attempts):
        try:
            return try_recombine(
                parent1, parent2, validator, max_expressions, rng, both=both
            )
        except StructuralMutationError as exc:
            last_error = exc

    logger.debug(
        "Crossover fell back to a generated body after %d attempts: %s",
        max_attempts,
        last_error,
    )
    builder = ExpressionBuilder(palette, rng, validator)
    children = []
    for skeleton in (parent1, parent2)[: 2 if both else 1]:
        child = skeleton.clone()
        child.replace_body(builder.random_size_body(child.function, max_expressions))
        children.append(child)
    return children


CrossoverFunction = Callable[..., List[Individual]]

CROSSOVER_FUNCTIONS: Dict[str, CrossoverFunction] = {
    "single_point": crossover_single_point,
}


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "try_recombine",
    "crossover_single_point",
    "CROSSOVER_FUNCTIONS",
]
