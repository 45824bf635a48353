"""Program model: typed functions holding linear expression lists."""

from __future__ import annotations

import copy
import hashlib
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .enums import PrimitiveType
from .errors import ConfigurationError

MAIN_FUNC = "main"


@dataclass
class Parameter:
    """A named, typed function input or output."""

    name: str
    dtype: PrimitiveType

    def __str__(self) -> str:
        return f"{self.name} {self.dtype.type_name}"


@dataclass
class Expression:
    """
    One operation: ``output = operator(operands...)``.
    Operands name function inputs or outputs of earlier expressions.
    """

    operator: str
    operands: List[str] = field(default_factory=list)
    output: str = ""

    def copy(self) -> "Expression":
        return Expression(self.operator, list(self.operands), self.output)

    def get_signature(self) -> str:
        return f"{self.output}={self.operator}({','.join(self.operands)})"

    def __str__(self) -> str:
        return f"{self.output} = {self.operator}({', '.join(self.operands)})"


class Function:
    """A named function with typed inputs, typed outputs and a body."""

    def __init__(
        self,
        name: str,
        inputs: Optional[Iterable[Parameter]] = None,
        outputs: Optional[Iterable[Parameter]] = None,
        expressions: Optional[Iterable[Expression]] = None,
    ):
        self.name = name
        self.inputs: List[Parameter] = list(inputs or [])
        self.outputs: List[Parameter] = list(outputs or [])
        self.expressions: List[Expression] = list(expressions or [])

    def add_input(self, param: Parameter) -> "Function":
        self.inputs.append(param)
        return self

    def add_output(self, param: Parameter) -> "Function":
        self.outputs.append(param)
        return self

    def add_expression(self, expression: Expression) -> "Function":
        self.expressions.append(expression)
        return self

    @property
    def input_types(self) -> List[PrimitiveType]:
        return [p.dtype for p in self.inputs]

    @property
    def output_types(self) -> List[PrimitiveType]:
        return [p.dtype for p in self.outputs]

    def parameter(self, name: str) -> Optional[Parameter]:
        """Look up an input or output parameter by name."""
        for param in self.inputs + self.outputs:
            if param.name == name:
                return param
        return None

    def copy(self) -> "Function":
        return Function(
            self.name,
            [Parameter(p.name, p.dtype) for p in self.inputs],
            [Parameter(p.name, p.dtype) for p in self.outputs],
            [e.copy() for e in self.expressions],
        )

    def _build_dependency_graph(self) -> Tuple[Dict[int, Set[int]], Dict[str, int]]:
        """Build data dependency graph and latest producers by output name."""
        dependencies: Dict[int, Set[int]] = defaultdict(set)
        producers: Dict[str, int] = {}

        for idx, expr in enumerate(self.expressions):
            for operand in expr.operands:
                if operand in producers:
                    dependencies[idx].add(producers[operand])
            producers[expr.output] = idx

        return dependencies, producers

    def effective_indices(self) -> List[int]:
        """
        Indices of expressions that contribute to the output parameters,
        found by tracing dependencies backward from the outputs.
        """
        dependencies, producers = self._build_dependency_graph()
        effective: Set[int] = set()
        to_check = [producers[p.name] for p in self.outputs if p.name in producers]

        while to_check:
            idx = to_check.pop()
            if idx in effective:
                continue
            effective.add(idx)
            to_check.extend(dependencies.get(idx, ()))

        return sorted(effective)

    def __repr__(self) -> str:
        ins = ", ".join(str(p) for p in self.inputs)
        outs = ", ".join(str(p) for p in self.outputs)
        return f"Function({self.name}({ins}) ({outs}), {len(self.expressions)} expressions)"


class Program:
    """
    An executable unit: named functions plus an entry function.
    Cloning is a deep copy so offspring never share bodies with parents.
    """

    def __init__(self, entry: str = MAIN_FUNC):
        self.entry = entry
        self.functions: Dict[str, Function] = {}

    def add_function(self, function: Function) -> Function:
        if function.name in self.functions:
            raise ConfigurationError(f"Function '{function.name}' is already defined.")
        self.functions[function.name] = function
        return function

    def has_function(self, name: str) -> bool:
        return name in self.functions

    def get_function(self, name: str) -> Function:
        try:
            return self.functions[name]
        except KeyError:
            raise KeyError(f"Program has no function named '{name}'.") from None

    def clone(self) -> "Program":
        return copy.deepcopy(self)

    def replace_body(self, name: str, expressions: Iterable[Expression]) -> None:
        """Replace a function body with copies of ``expressions``."""
        self.get_function(name).expressions = [e.copy() for e in expressions]

    def get_signature(self, name: str) -> str:
        """Hash of the effective expressions of function ``name``."""
        function = self.get_function(name)
        sig_parts = [
            function.expressions[idx].get_signature()
            for idx in function.effective_indices()
        ]
        return hashlib.md5("|".join(sig_parts).encode()).hexdigest()

    def to_human_readable(self, name: str) -> List[str]:
        """Render a function body, marking expressions that reach an output."""
        function = self.get_function(name)
        effective = set(function.effective_indices())
        readable = []
        for idx, expr in enumerate(function.expressions):
            prefix = "✓" if idx in effective else "✗"
            readable.append(f"{prefix} {expr}")
        return readable


__all__ = ["MAIN_FUNC", "Parameter", "Expression", "Function", "Program"]
