"""Enumerations for primitive types and population lifecycle."""

from enum import Enum, IntEnum
from typing import Dict, List, Union

from .errors import ConfigurationError


class PrimitiveType(IntEnum):
    """Primitive numeric types as integer indices."""

    F32 = 1  # f32
    F64 = 2  # f64
    I32 = 3  # i32
    I64 = 4  # i64

    @property
    def type_name(self) -> str:
        return self.name.lower()

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveType.F32, PrimitiveType.F64)

    @classmethod
    def parse(cls, value: Union[str, int, "PrimitiveType"]) -> "PrimitiveType":
        """Resolve a type name such as ``"f32"`` (or an index) to a PrimitiveType."""
        if isinstance(value, PrimitiveType):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in TYPE_NAMES:
                return TYPE_NAMES[key]
            raise ConfigurationError(f"Unknown primitive type '{value}'.")
        try:
            return cls(int(value))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Unknown primitive type {value!r}.") from exc


class PopulationState(IntEnum):
    """Lifecycle of a population."""

    UNINITIALIZED = 0
    INITIALIZED = 1
    EVOLVING = 2
    CONVERGED = 3
    EXHAUSTED = 4


class TerminationReason(str, Enum):
    """Why an evolutionary run stopped."""

    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


TYPE_NAMES: Dict[str, PrimitiveType] = {t.name.lower(): t for t in PrimitiveType}

FLOAT_TYPES: List[PrimitiveType] = [PrimitiveType.F32, PrimitiveType.F64]

INTEGER_TYPES: List[PrimitiveType] = [PrimitiveType.I32, PrimitiveType.I64]


__all__ = [
    "PrimitiveType",
    "PopulationState",
    "TerminationReason",
    "TYPE_NAMES",
    "FLOAT_TYPES",
    "INTEGER_TYPES",
]
