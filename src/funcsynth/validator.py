"""Structural validation of function bodies against a palette."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .enums import PrimitiveType
from .errors import StructuralMutationError
from .palette import FunctionPalette
from .program import Expression, Function


class BodyValidator:
    """
    Enforces cascading validity: each expression may only read names
    defined by the function inputs or by earlier expressions, with types
    matching its palette entry.
    """

    def __init__(self, palette: FunctionPalette):
        self.palette = palette

    @staticmethod
    def initial_scope(function: Function) -> Dict[str, PrimitiveType]:
        """Names readable before the first expression runs."""
        return {p.name: p.dtype for p in function.inputs}

    @staticmethod
    def get_valid_operands(
        scope: Dict[str, PrimitiveType], dtype: PrimitiveType
    ) -> List[str]:
        """Names in scope holding a value of ``dtype``."""
        return [name for name, name_type in scope.items() if name_type == dtype]

    def check_expression(
        self,
        expression: Expression,
        scope: Dict[str, PrimitiveType],
        function: Function,
    ) -> Optional[str]:
        """Return a description of the first problem found, or None."""
        entry = self.palette.get(expression.operator)
        if entry is None:
            return f"operator '{expression.operator}' is not in the palette"
        if len(expression.operands) != entry.arity:
            return (
                f"operator '{entry.name}' takes {entry.arity} operands, "
                f"got {len(expression.operands)}"
            )
        for operand in expression.operands:
            if operand not in scope:
                return f"operand '{operand}' is not defined"
            if scope[operand] != entry.operand_type:
                return (
                    f"operand '{operand}' is {scope[operand].type_name}, "
                    f"'{entry.name}' expects {entry.operand_type.type_name}"
                )

        if not expression.output:
            return "expression has no output"
        if any(p.name == expression.output for p in function.inputs):
            return f"output '{expression.output}' overwrites an input"
        declared = function.parameter(expression.output)
        if declared is not None and declared.dtype != entry.result_type:
            return (
                f"output '{expression.output}' is {declared.dtype.type_name}, "
                f"'{entry.name}' yields {entry.result_type.type_name}"
            )
        existing = scope.get(expression.output)
        if existing is not None and existing != entry.result_type:
            return f"output '{expression.output}' changes type"
        return None

    def validate(
        self,
        function: Function,
        expressions: Optional[Iterable[Expression]] = None,
        max_expressions: Optional[int] = None,
    ) -> None:
        """
        Validate ``expressions`` (default: the function's own body) as the
        body of ``function``. Every output parameter must be assigned.
        Raises StructuralMutationError on failure.
        """
        body = list(function.expressions if expressions is None else expressions)
        if max_expressions is not None and len(body) > max_expressions:
            raise StructuralMutationError(
                f"body has {len(body)} expressions, bound is {max_expressions}"
            )

        scope = self.initial_scope(function)
        for idx, expression in enumerate(body):
            problem = self.check_expression(expression, scope, function)
            if problem is not None:
                raise StructuralMutationError(f"expression {idx}: {problem}")
            scope[expression.output] = self.palette.get(expression.operator).result_type

        for param in function.outputs:
            if param.name not in scope:
                raise StructuralMutationError(f"output '{param.name}' is never assigned")

    def is_valid(
        self,
        function: Function,
        expressions: Optional[Iterable[Expression]] = None,
        max_expressions: Optional[int] = None,
    ) -> bool:
        try:
            self.validate(function, expressions, max_expressions)
        except StructuralMutationError:
            return False
        return True


__all__ = ["BodyValidator"]
