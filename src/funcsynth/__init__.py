"""Genetic-programming function synthesis over serialized numeric datasets."""

from .enums import (
    PrimitiveType,
    PopulationState,
    TerminationReason,
    TYPE_NAMES,
    FLOAT_TYPES,
    INTEGER_TYPES,
)
from .errors import (
    FuncSynthError,
    ConfigurationError,
    StructuralMutationError,
    ExecutionError,
)
from . import codec
from .program import MAIN_FUNC, Parameter, Expression, Function, Program
from .skeleton import make_gensym, make_initial_program
from .dataset import Dataset, make_dataset
from .palette import PaletteEntry, BUILTIN_OPERATIONS, resolve_builtin, FunctionPalette
from .validator import BodyValidator
from .builder import LOCAL_PREFIX, local_name, ExpressionBuilder
from .executor import ProgramExecutor
from .individual import Individual
from .crossover import try_recombine, crossover_single_point, CROSSOVER_FUNCTIONS
from .mutation import MUTATION_TYPES, mutate
from .evaluation import (
    WORST_FITNESS,
    evaluate_per_byte,
    evaluate_per_value,
    EVALUATION_FUNCTIONS,
    Evaluator,
)
from .config import DEFAULT_FUNCTION_SET, SELECTION_POLICIES, EvolutionConfig
from .population import GenerationStats, RunResult, Population
from .demos import example_polynomial_fitting, example_volume

__all__ = [
    "PrimitiveType",
    "PopulationState",
    "TerminationReason",
    "TYPE_NAMES",
    "FLOAT_TYPES",
    "INTEGER_TYPES",
    "FuncSynthError",
    "ConfigurationError",
    "StructuralMutationError",
    "ExecutionError",
    "codec",
    "MAIN_FUNC",
    "Parameter",
    "Expression",
    "Function",
    "Program",
    "make_gensym",
    "make_initial_program",
    "Dataset",
    "make_dataset",
    "PaletteEntry",
    "BUILTIN_OPERATIONS",
    "resolve_builtin",
    "FunctionPalette",
    "BodyValidator",
    "LOCAL_PREFIX",
    "local_name",
    "ExpressionBuilder",
    "ProgramExecutor",
    "Individual",
    "try_recombine",
    "crossover_single_point",
    "CROSSOVER_FUNCTIONS",
    "MUTATION_TYPES",
    "mutate",
    "WORST_FITNESS",
    "evaluate_per_byte",
    "evaluate_per_value",
    "EVALUATION_FUNCTIONS",
    "Evaluator",
    "DEFAULT_FUNCTION_SET",
    "SELECTION_POLICIES",
    "EvolutionConfig",
    "GenerationStats",
    "RunResult",
    "Population",
    "example_polynomial_fitting",
    "example_volume",
]
