"""Execution engine for evolved programs."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from . import codec
from .errors import ExecutionError
from .palette import FunctionPalette
from .program import Expression, Program


class ProgramExecutor:
    """
    Executes one function of a program over serialized sample buffers.

    Operators are applied to whole sample columns at once; since palette
    operations are elementwise this is the same as invoking the function
    once per sample row.
    """

    def __init__(self, palette: FunctionPalette):
        self.palette = palette

    def execute(
        self,
        program: Program,
        function_name: str,
        inputs: Sequence[bytes],
    ) -> List[bytes]:
        """
        Execute ``function_name`` and return one output buffer per output parameter.

        Args:
            program: Program holding the function
            function_name: Name of the function to run
            inputs: One serialized buffer per input parameter
        Returns:
            One serialized buffer per output parameter
        """
        try:
            function = program.get_function(function_name)
        except KeyError as exc:
            raise ExecutionError(str(exc)) from exc

        if len(inputs) != len(function.inputs):
            raise ExecutionError(
                f"'{function_name}' takes {len(function.inputs)} inputs, got {len(inputs)}."
            )

        variables: Dict[str, np.ndarray] = {}
        sample_count: Optional[int] = None
        for param, buffer in zip(function.inputs, inputs):
            try:
                values = codec.decode(buffer, param.dtype)
            except ValueError as exc:
                raise ExecutionError(f"Input '{param.name}': {exc}") from exc
            if sample_count is None:
                sample_count = len(values)
            elif len(values) != sample_count:
                raise ExecutionError("Input buffers hold different sample counts.")
            variables[param.name] = values

        with np.errstate(all="ignore"):
            for expression in function.expressions:
                variables[expression.output] = self._execute_expression(
                    expression, variables, sample_count
                )

        outputs = []
        for param in function.outputs:
            if param.name not in variables:
                raise ExecutionError(f"Output '{param.name}' is never assigned.")
            outputs.append(codec.encode_array(variables[param.name], param.dtype))
        return outputs

    def execute_values(
        self,
        program: Program,
        function_name: str,
        inputs: Iterable[Iterable[float]],
    ) -> List[np.ndarray]:
        """Encode plain values, execute, and decode the outputs."""
        function = program.get_function(function_name)
        buffers = [
            codec.encode_array(values, param.dtype)
            for param, values in zip(function.inputs, inputs)
        ]
        outputs = self.execute(program, function_name, buffers)
        return [
            codec.decode(buffer, param.dtype)
            for param, buffer in zip(function.outputs, outputs)
        ]

    def _execute_expression(
        self,
        expression: Expression,
        variables: Dict[str, np.ndarray],
        sample_count: Optional[int],
    ) -> np.ndarray:
        """Execute a single expression."""
        entry = self.palette.get(expression.operator)
        if entry is None:
            raise ExecutionError(f"Unknown operator '{expression.operator}'.")
        if len(expression.operands) != entry.arity:
            raise ExecutionError(
                f"'{entry.name}' takes {entry.arity} operands, got {len(expression.operands)}."
            )

        try:
            args = [variables[name] for name in expression.operands]
        except KeyError as exc:
            raise ExecutionError(f"Operand {exc} is not defined.") from exc

        try:
            result = entry.function(*args)
        except Exception as exc:
            raise ExecutionError(f"'{entry.name}' failed: {exc}") from exc

        try:
            result = np.asarray(result).astype(codec.numpy_dtype(entry.result_type))
        except (TypeError, ValueError) as exc:
            raise ExecutionError(f"'{entry.name}' returned a non-numeric result.") from exc
        if sample_count is None:
            return result
        try:
            return np.broadcast_to(result, (sample_count,)).copy()
        except ValueError as exc:
            raise ExecutionError(f"'{entry.name}' returned shape {result.shape}.") from exc


__all__ = ["ProgramExecutor"]
