"""stockcut: one-dimensional cutting-stock optimization by evolutionary search."""

from stockcut.algorithms import Optimizer, optimize
from stockcut.core import (
    CutPiece,
    EmptyInputError,
    InfeasibleInputError,
    OptimizerConfig,
    ProblemConfig,
    Solution,
    StockCutError,
    StockPiece,
    load_problem,
)

__version__ = "0.1.0"

__all__ = [
    "CutPiece",
    "EmptyInputError",
    "InfeasibleInputError",
    "Optimizer",
    "OptimizerConfig",
    "ProblemConfig",
    "Solution",
    "StockCutError",
    "StockPiece",
    "load_problem",
    "optimize",
]
