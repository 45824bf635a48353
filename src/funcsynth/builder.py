"""Palette-driven random generation of expressions and bodies."""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

from .enums import PrimitiveType
from .errors import StructuralMutationError
from .palette import FunctionPalette
from .program import Expression, Function, Parameter
from .validator import BodyValidator

LOCAL_PREFIX = "evo_tmp"


def local_name(position: int) -> str:
    """Name of the local written by the expression at ``position``."""
    return f"{LOCAL_PREFIX}_{position}"


class ExpressionBuilder:
    """
    Builds random, structurally valid expressions for a function,
    drawing operators from the palette and operands from the names in scope.
    """

    def __init__(
        self,
        palette: FunctionPalette,
        rng: Optional[random.Random] = None,
        validator: Optional[BodyValidator] = None,
    ):
        self.palette = palette
        self.rng = rng or random.Random()
        self.validator = validator or BodyValidator(palette)

    def random_expression(
        self,
        scope: Dict[str, PrimitiveType],
        position: int,
        result_type: Optional[PrimitiveType] = None,
    ) -> Expression:
        """Draw one expression whose operands are all readable in ``scope``."""
        entry = self.palette.sample_random_entry(
            self.rng, result_type=result_type, operand_types=set(scope.values())
        )
        if entry is None:
            wanted = "" if result_type is None else f" producing {result_type.type_name}"
            raise StructuralMutationError(
                f"No palette operation{wanted} can read the names in scope."
            )
        candidates = self.validator.get_valid_operands(scope, entry.operand_type)
        operands = [self.rng.choice(candidates) for _ in range(entry.arity)]
        return Expression(entry.name, operands, local_name(position))

    def random_body(self, function: Function, count: int) -> List[Expression]:
        """
        Generate ``count`` chained expressions and bind the function
        outputs to the last expressions producing matching types.

        When free draws leave an output unbound, the trailing expressions
        are redrawn to write the outputs directly.
        """
        if count < len(function.outputs):
            raise StructuralMutationError(
                f"{count} expressions cannot assign {len(function.outputs)} outputs."
            )

        body = self._draw(function, count)
        self.bind_outputs(function, body)
        if not self.validator.is_valid(function, body):
            body = self._draw(function, count, function.outputs)
        self.validator.validate(function, body)
        return body

    def random_size_body(self, function: Function, max_expressions: int) -> List[Expression]:
        """Generate a body of ``len(outputs)``..``max_expressions`` expressions."""
        smallest = min(max(len(function.outputs), 1), max_expressions)
        return self.random_body(function, self.rng.randint(smallest, max_expressions))

    def _draw(
        self,
        function: Function,
        count: int,
        tail: Sequence[Parameter] = (),
    ) -> List[Expression]:
        """Chain ``count`` draws; the last ``len(tail)`` write those parameters."""
        scope = self.validator.initial_scope(function)
        body: List[Expression] = []
        free = count - len(tail)
        for position in range(count):
            if position < free:
                expression = self.random_expression(scope, position)
            else:
                param = tail[position - free]
                expression = self.random_expression(scope, position, param.dtype)
                expression.output = param.name
            body.append(expression)
            scope[expression.output] = self.palette.get(expression.operator).result_type
        return body

    def bind_outputs(self, function: Function, body: List[Expression]) -> None:
        """
        Retarget the latest expression of matching result type to each
        output parameter, renaming later reads of the replaced local.
        """
        output_names = {p.name for p in function.outputs}
        for param in function.outputs:
            if any(e.output == param.name for e in body):
                continue
            for idx in range(len(body) - 1, -1, -1):
                expression = body[idx]
                if expression.output in output_names:
                    continue
                entry = self.palette.get(expression.operator)
                if entry is None or entry.result_type != param.dtype:
                    continue
                self._rename_output(body, idx, param.name)
                break

    @staticmethod
    def _rename_output(body: List[Expression], idx: int, new_name: str) -> None:
        old_name = body[idx].output
        body[idx].output = new_name
        for expression in body[idx + 1 :]:
            expression.operands = [
                new_name if operand == old_name else operand
                for operand in expression.operands
            ]
            if expression.output == old_name:
                break


__all__ = ["LOCAL_PREFIX", "local_name", "ExpressionBuilder"]
