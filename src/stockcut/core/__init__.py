"""Core data models, configuration and errors."""

from .config import OptimizerConfig, ProblemConfig, dump_problem, load_problem
from .exceptions import (
    EmptyInputError,
    EmptyPopulationError,
    InfeasibleInputError,
    StockCutError,
)
from .fixed_point import LengthScale
from .models import Bin, CutPiece, DemandPiece, PieceCatalog, Solution, StockPiece

__all__ = [
    "Bin",
    "CutPiece",
    "DemandPiece",
    "EmptyInputError",
    "EmptyPopulationError",
    "InfeasibleInputError",
    "LengthScale",
    "OptimizerConfig",
    "PieceCatalog",
    "ProblemConfig",
    "Solution",
    "StockCutError",
    "StockPiece",
    "dump_problem",
    "load_problem",
]
