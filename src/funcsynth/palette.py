"""Function palette: the closed set of primitives evolution may use."""

from __future__ import annotations

import inspect
import random
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Collection,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Union,
)

import numpy as np

from .enums import FLOAT_TYPES, INTEGER_TYPES, PrimitiveType
from .errors import ConfigurationError

TypeLike = Union[PrimitiveType, str, int]


@dataclass(frozen=True)
class PaletteEntry:
    """Metadata describing one primitive operation."""

    name: str
    arity: int
    operand_type: PrimitiveType
    result_type: PrimitiveType
    function: Callable[..., Any] = field(compare=False, repr=False)
    doc: str = ""


_FLOAT_BUILTINS: Dict[str, tuple] = {
    "add": (2, np.add),
    "sub": (2, np.subtract),
    "mul": (2, np.multiply),
    "div": (2, np.divide),
    "neg": (1, np.negative),
    "abs": (1, np.abs),
    "pow": (2, np.power),
    "cos": (1, np.cos),
    "sin": (1, np.sin),
    "acos": (1, np.arccos),
    "asin": (1, np.arcsin),
    "sqrt": (1, np.sqrt),
    "log": (1, np.log),
    "exp": (1, np.exp),
}

_INTEGER_BUILTINS: Dict[str, tuple] = {
    "add": (2, np.add),
    "sub": (2, np.subtract),
    "mul": (2, np.multiply),
    "neg": (1, np.negative),
    "abs": (1, np.abs),
}


def _build_catalog() -> Dict[str, PaletteEntry]:
    catalog: Dict[str, PaletteEntry] = {}
    for types, ops in ((FLOAT_TYPES, _FLOAT_BUILTINS), (INTEGER_TYPES, _INTEGER_BUILTINS)):
        for dtype in types:
            for op_name, (arity, ufunc) in ops.items():
                name = f"{dtype.type_name}.{op_name}"
                catalog[name] = PaletteEntry(
                    name=name,
                    arity=arity,
                    operand_type=dtype,
                    result_type=dtype,
                    function=ufunc,
                    doc=f"numpy.{ufunc.__name__} over {dtype.type_name}",
                )
    return catalog


BUILTIN_OPERATIONS: Dict[str, PaletteEntry] = _build_catalog()


def resolve_builtin(name: str) -> Optional[PaletteEntry]:
    """Return the builtin entry for a name such as ``"f32.add"``, if any."""
    return BUILTIN_OPERATIONS.get(name.strip().lower())


def _check_callable_arity(name: str, function: Callable[..., Any], arity: int) -> None:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return
    params = list(signature.parameters.values())
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        return
    positional = [
        p
        for p in params
        if p.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        )
    ]
    required = [p for p in positional if p.default is inspect.Parameter.empty]
    if len(positional) < arity:
        raise ConfigurationError(
            f"Function '{name}' accepts fewer positional arguments than arity {arity}."
        )
    if len(required) > arity:
        raise ConfigurationError(
            f"Function '{name}' requires more positional arguments than arity {arity}."
        )


class FunctionPalette:
    """
    Registry of operations eligible for insertion into evolved bodies.
    Also records which function of the program is being evolved.
    Shared by reference across all individuals; frozen once evolution starts.
    """

    def __init__(self, entries: Optional[Iterable[PaletteEntry]] = None):
        self._entries: Dict[str, PaletteEntry] = {}
        self._target_function: Optional[str] = None
        self._frozen = False
        for entry in entries or ():
            self._add(entry)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "FunctionPalette":
        """Build a palette from builtin names; repeated names are collapsed."""
        palette = cls()
        for name in names:
            if name.strip().lower() in palette:
                continue
            palette.register(name)
        return palette

    def _add(self, entry: PaletteEntry) -> PaletteEntry:
        if self._frozen:
            raise ConfigurationError("Function palette is frozen.")
        if entry.name in self._entries:
            raise ConfigurationError(f"Operation '{entry.name}' is already registered.")
        self._entries[entry.name] = entry
        return entry

    def register(
        self,
        name: str,
        arity: Optional[int] = None,
        operand_type: Optional[TypeLike] = None,
        result_type: Optional[TypeLike] = None,
        function: Optional[Callable[..., Any]] = None,
        *,
        doc: str = "",
    ) -> PaletteEntry:
        """
        Register an operation. Without ``function`` the builtin catalog
        provides the implementation, and any arity/types given must agree
        with it.
        """
        clean_name = name.strip().lower() if function is None else name.strip()
        if not clean_name:
            raise ConfigurationError("Operation name must be a non-empty string.")

        if function is None:
            builtin = resolve_builtin(clean_name)
            if builtin is None:
                raise ConfigurationError(f"Unknown builtin operation '{name}'.")
            if arity is not None and int(arity) != builtin.arity:
                raise ConfigurationError(
                    f"Operation '{clean_name}' has arity {builtin.arity}, not {arity}."
                )
            for given, expected in ((operand_type, builtin.operand_type), (result_type, builtin.result_type)):
                if given is not None and PrimitiveType.parse(given) != expected:
                    raise ConfigurationError(
                        f"Operation '{clean_name}' is typed {expected.type_name}, not {given}."
                    )
            return self._add(builtin)

        if arity is None or operand_type is None or result_type is None:
            raise ConfigurationError(
                f"Operation '{clean_name}' needs arity, operand_type and result_type."
            )
        arity = int(arity)
        if arity < 1:
            raise ConfigurationError("Operations must take at least one operand.")
        _check_callable_arity(clean_name, function, arity)

        return self._add(
            PaletteEntry(
                name=clean_name,
                arity=arity,
                operand_type=PrimitiveType.parse(operand_type),
                result_type=PrimitiveType.parse(result_type),
                function=function,
                doc=doc,
            )
        )

    def get(self, name: str) -> Optional[PaletteEntry]:
        return self._entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self._entries.values())

    @property
    def names(self) -> List[str]:
        return list(self._entries)

    def entries(
        self,
        *,
        arity: Optional[int] = None,
        operand_type: Optional[TypeLike] = None,
        result_type: Optional[TypeLike] = None,
        operand_types: Optional[Collection[PrimitiveType]] = None,
    ) -> List[PaletteEntry]:
        """Entries matching every given filter, in registration order."""
        wanted_operand = None if operand_type is None else PrimitiveType.parse(operand_type)
        wanted_result = None if result_type is None else PrimitiveType.parse(result_type)
        matches = []
        for entry in self._entries.values():
            if arity is not None and entry.arity != arity:
                continue
            if wanted_operand is not None and entry.operand_type != wanted_operand:
                continue
            if wanted_result is not None and entry.result_type != wanted_result:
                continue
            if operand_types is not None and entry.operand_type not in operand_types:
                continue
            matches.append(entry)
        return matches

    def sample_random_entry(
        self,
        rng: Optional[random.Random] = None,
        *,
        arity: Optional[int] = None,
        operand_type: Optional[TypeLike] = None,
        result_type: Optional[TypeLike] = None,
        operand_types: Optional[Collection[PrimitiveType]] = None,
    ) -> Optional[PaletteEntry]:
        """Uniformly choose an entry matching the filters, or None if none match."""
        candidates = self.entries(
            arity=arity,
            operand_type=operand_type,
            result_type=result_type,
            operand_types=operand_types,
        )
        if not candidates:
            return None
        return (rng or random).choice(candidates)

    def set_target_function(self, name: str) -> None:
        """Record which program function has its body evolved."""
        if self._frozen:
            raise ConfigurationError("Function palette is frozen.")
        if not name or not name.strip():
            raise ConfigurationError("Function to evolve must have a non-empty name.")
        self._target_function = name

    @property
    def target_function(self) -> Optional[str]:
        return self._target_function

    def freeze(self) -> "FunctionPalette":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        return f"FunctionPalette({self.names}, target={self._target_function!r})"


__all__ = [
    "PaletteEntry",
    "BUILTIN_OPERATIONS",
    "resolve_builtin",
    "FunctionPalette",
]
