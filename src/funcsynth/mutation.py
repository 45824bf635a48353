"""Palette-constrained mutation of evolved bodies."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from .builder import ExpressionBuilder, local_name
from .enums import PrimitiveType
from .errors import StructuralMutationError
from .individual import Individual
from .palette import FunctionPalette
from .program import Expression, Function
from .validator import BodyValidator

logger = logging.getLogger(__name__)

MUTATION_TYPES = ("replace", "add", "remove")

DEFAULT_MAX_ATTEMPTS = 10


def _scope_at(
    validator: BodyValidator,
    function: Function,
    body: List[Expression],
    position: int,
) -> Dict[str, PrimitiveType]:
    """Names readable just before ``body[position]`` runs."""
    scope = validator.initial_scope(function)
    for expression in body[:position]:
        entry = validator.palette.get(expression.operator)
        if entry is not None:
            scope[expression.output] = entry.result_type
    return scope


def _fresh_local(body: List[Expression]) -> str:
    used = {e.output for e in body}
    position = len(body)
    while local_name(position) in used:
        position += 1
    return local_name(position)


def mutate(
    individual: Individual,
    palette: FunctionPalette,
    max_expressions: int,
    rng: Optional[random.Random] = None,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Individual:
    """
    Return a mutated copy of ``individual``.

    One of ``replace`` (swap an expression for a fresh palette draw writing
    the same name), ``add`` (insert a fresh expression) or ``remove`` is
    applied. Invalid results are retried; once attempts run out an
    unchanged copy is returned.
    """
    rng = rng or random.Random()
    validator = BodyValidator(palette)
    builder = ExpressionBuilder(palette, rng, validator)
    function = individual.function

    for _ in range(max_attempts):
        body = [e.copy() for e in individual.body]
        mutation_type = rng.choice(MUTATION_TYPES)

        try:
            if mutation_type == "replace" and body:
                idx = rng.randrange(len(body))
                expression = builder.random_expression(
                    _scope_at(validator, function, body, idx), idx
                )
                expression.output = body[idx].output
                body[idx] = expression
            elif mutation_type == "add" and len(body) < max_expressions:
                idx = rng.randint(0, len(body))
                expression = builder.random_expression(
                    _scope_at(validator, function, body, idx), idx
                )
                expression.output = _fresh_local(body)
                body.insert(idx, expression)
            elif mutation_type == "remove" and len(body) > 1:
                del body[rng.randrange(len(body))]
            else:
                continue

            validator.validate(function, body, max_expressions)
        except StructuralMutationError as exc:
            logger.debug("Rejected %s mutation: %s", mutation_type, exc)
            continue

        mutated = individual.clone()
        mutated.replace_body(body)
        return mutated

    return individual.clone()


__all__ = ["MUTATION_TYPES", "mutate"]
