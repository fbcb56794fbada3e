"""Packing algorithms: the evolutionary engine and a first-fit baseline."""

from .optimizer import Optimizer, generate_random_units, optimize
from .population import Breedable, EpochStats, Population
from .simple_packer import FirstFitDecreasingPacker
from .unit import BinPackerUnit

__all__ = [
    "BinPackerUnit",
    "Breedable",
    "EpochStats",
    "FirstFitDecreasingPacker",
    "Optimizer",
    "Population",
    "generate_random_units",
    "optimize",
]
