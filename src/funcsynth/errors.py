"""Exception hierarchy."""


class FuncSynthError(Exception):
    """Base class for all funcsynth errors."""


class ConfigurationError(FuncSynthError, ValueError):
    """Invalid signatures, palettes, datasets or run parameters."""


class StructuralMutationError(FuncSynthError):
    """A genetic operator produced a body that is not a valid program."""


class ExecutionError(FuncSynthError, RuntimeError):
    """A program failed to run or produced malformed output."""


__all__ = [
    "FuncSynthError",
    "ConfigurationError",
    "StructuralMutationError",
    "ExecutionError",
]
