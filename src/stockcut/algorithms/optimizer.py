"""
Cutting-stock optimizer: collects real-valued input, runs the search, and
converts the best packing back to a real-valued ``Solution``.

Example:
    >>> solution = (
    ...     Optimizer(decimal_places=2)
    ...     .add_stock_lengths([96.0, 120.0])
    ...     .add_cut_lengths([10.0, 20.0, 30.0, 60.0, 96.0])
    ...     .set_blade_width(0.25)
    ...     .set_random_seed(100)
    ...     .optimize()
    ... )
    >>> solution.cut_count
    5
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Sequence

import numpy as np

from stockcut.algorithms.population import EpochStats, Population
from stockcut.algorithms.unit import BinPackerUnit
from stockcut.core.config import OptimizerConfig, ProblemConfig
from stockcut.core.exceptions import EmptyInputError, InfeasibleInputError
from stockcut.core.fixed_point import LengthScale
from stockcut.core.models import CutPiece, PieceCatalog, Solution, StockPiece

logger = logging.getLogger(__name__)


class Optimizer:
    """
    Builder and driver for one optimization run.

    Lengths are converted to integer working units as they are added, using
    ``10 ** decimal_places`` as the multiplier.
    """

    def __init__(self, decimal_places: int = 2, config: OptimizerConfig | None = None):
        self.scale = LengthScale(decimal_places)
        self.config = config or OptimizerConfig()
        self.stock_lengths: list[int] = []
        self.cut_lengths: list[int] = []
        self.spacing = 0
        self.random_seed: int | None = None
        self.history: list[EpochStats] = []

    @classmethod
    def from_problem(cls, problem: ProblemConfig) -> Optimizer:
        optimizer = (
            cls(problem.decimal_places, problem.optimizer)
            .add_stock_lengths(problem.stock_lengths)
            .add_cut_lengths(problem.cut_lengths)
            .set_blade_width(problem.blade_width)
        )
        if problem.seed is not None:
            optimizer.set_random_seed(problem.seed)
        return optimizer

    # ── Input ───────────────────────────────────────────────────────────────

    def add_stock_length(self, length: float) -> Optimizer:
        self.stock_lengths.append(self._positive_units(length, "Stock length"))
        return self

    def add_stock_lengths(self, lengths: Iterable[float]) -> Optimizer:
        for length in lengths:
            self.add_stock_length(length)
        return self

    def add_cut_length(self, length: float) -> Optimizer:
        self.cut_lengths.append(self._positive_units(length, "Cut length"))
        return self

    def add_cut_lengths(self, lengths: Iterable[float]) -> Optimizer:
        for length in lengths:
            self.add_cut_length(length)
        return self

    def set_blade_width(self, blade_width: float) -> Optimizer:
        self.spacing = self.scale.to_units(blade_width)
        return self

    def set_random_seed(self, seed: int | None) -> Optimizer:
        self.random_seed = seed
        return self

    def _positive_units(self, length: float, what: str) -> int:
        units = self.scale.to_units(length)
        if units <= 0:
            raise ValueError(
                f"{what} {length} is not positive at {self.scale.decimal_places} decimal places"
            )
        return units

    # ── Run ─────────────────────────────────────────────────────────────────

    def optimize(self) -> Solution:
        """
        Run the evolutionary search and return the best cutting plan.

        Raises:
            EmptyInputError:      No stock lengths or no cut lengths.
            InfeasibleInputError: A cut length exceeds every stock length.
        """
        if not self.stock_lengths:
            raise EmptyInputError("At least one stock length is required")
        if not self.cut_lengths:
            raise EmptyInputError("At least one cut length is required")

        catalog = PieceCatalog(self.cut_lengths)
        cfg = self.config
        started = time.perf_counter()
        logger.info(
            "optimizing %d cut pieces over %d stock lengths "
            "(population=%d, epochs=%d, seed=%s)",
            len(catalog), len(self.stock_lengths), cfg.population_size, cfg.epochs, self.random_seed,
        )

        units = generate_random_units(
            self.stock_lengths, catalog, self.spacing, cfg.population_size, self.random_seed
        )
        population = Population(
            units,
            size=cfg.population_size,
            breed_factor=cfg.breed_factor,
            survival_factor=cfg.survival_factor,
            seed=self.random_seed,
        )
        if cfg.workers > 1:
            population.epochs_parallel(cfg.epochs, cfg.workers)
        else:
            population.epochs(cfg.epochs)
        self.history = population.history

        solution = self._to_solution(population.best())
        logger.info(
            "best fitness %.6f with %d stock pieces in %.2fs",
            solution.fitness, len(solution.stock_pieces), time.perf_counter() - started,
        )
        return solution

    def _to_solution(self, unit: BinPackerUnit) -> Solution:
        stock_pieces = []
        for bin_ in unit.bins:
            # stable sort: equal lengths keep their packing order
            ordered = sorted(bin_.pieces, key=lambda p: unit.catalog.lengths[p], reverse=True)
            cut_pieces = []
            location = 0
            for piece_id in ordered:
                length = unit.catalog.lengths[piece_id]
                cut_pieces.append(
                    CutPiece(location=self.scale.to_length(location), length=self.scale.to_length(length))
                )
                location += length + bin_.spacing
            stock_pieces.append(
                StockPiece(
                    length=self.scale.to_length(bin_.capacity),
                    cut_pieces=tuple(cut_pieces),
                    blade_width=self.scale.to_length(bin_.spacing),
                )
            )
        return Solution(fitness=unit.fitness(), stock_pieces=tuple(stock_pieces))


def generate_random_units(
    stock_lengths: Sequence[int],
    catalog: PieceCatalog,
    spacing: int,
    num_units: int,
    seed: int | None = None,
) -> list[BinPackerUnit]:
    """
    Build ``num_units`` independent first-fit packings over shuffled piece orders.

    Raises:
        EmptyInputError:      No stock lengths.
        InfeasibleInputError: On the first piece that fits no stock length.
    """
    if not stock_lengths:
        raise EmptyInputError("At least one stock length is required")
    longest = max(stock_lengths)
    for piece in catalog:
        if piece.length > longest:
            raise InfeasibleInputError(piece.id, piece.length, longest)

    rng = np.random.default_rng(seed)
    order = list(catalog.ids)
    units = []
    for _ in range(num_units):
        order = [order[int(i)] for i in rng.permutation(len(order))]
        units.append(BinPackerUnit.pack(stock_lengths, catalog, order, spacing, rng))
    return units


def optimize(
    stock_lengths: Iterable[float],
    cut_lengths: Iterable[float],
    blade_width: float = 0.0,
    decimal_places: int = 2,
    seed: int | None = None,
    config: OptimizerConfig | None = None,
) -> Solution:
    """One-call form of ``Optimizer``."""
    return (
        Optimizer(decimal_places, config)
        .add_stock_lengths(stock_lengths)
        .add_cut_lengths(cut_lengths)
        .set_blade_width(blade_width)
        .set_random_seed(seed)
        .optimize()
    )
