"""
Generic evolutionary population engine.

The engine only knows the ``Breedable`` contract: a unit can report its
fitness and can breed with another unit given a random generator. It
never looks inside a unit, so the same loop drives any representation.

Each epoch:
    1. Breed ``breed_factor * size`` offspring from rank-weighted parents.
    2. Keep the best ``survival_factor * size`` of parents + offspring.
    3. Breed from the survivors until the population is back to ``size``.

Reproducibility:
    ``epochs()`` consumes a single numpy ``Generator`` in a fixed order,
    so the same seed always yields the same final population.
    ``epochs_parallel()`` draws parents and one child seed per offspring
    from that generator and breeds on worker processes. It consumes a
    different random stream, so it is NOT bit-identical to ``epochs()``
    for the same seed; only the single-process path is the reference for
    seeded runs.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

import numpy as np

from stockcut.core.exceptions import EmptyPopulationError

logger = logging.getLogger(__name__)


class Breedable(ABC):
    """Capability the population engine needs from a candidate solution."""

    @abstractmethod
    def fitness(self) -> float:
        """Higher is better."""

    @abstractmethod
    def breed_with(self, other, rng: np.random.Generator) -> Breedable:
        """Return a new child of ``self`` and ``other``; parents are not modified."""


U = TypeVar("U", bound=Breedable)


@dataclass(frozen=True)
class EpochStats:
    """Fitness snapshot taken after an epoch."""

    epoch: int
    best_fitness: float
    mean_fitness: float

    def to_dict(self) -> dict:
        return {"epoch": self.epoch, "best_fitness": self.best_fitness, "mean_fitness": self.mean_fitness}


def _breed_pair(task: tuple[Breedable, Breedable, int]) -> tuple[float, Breedable]:
    """Worker-side breeding with a private generator."""
    parent_a, parent_b, seed = task
    child = parent_a.breed_with(parent_b, np.random.default_rng(seed))
    return child.fitness(), child


def _by_fitness(entry: tuple[float, Breedable]) -> float:
    return entry[0]


class Population(Generic[U]):
    """
    A generation of units kept sorted by fitness, best first.

    Args:
        units:           Initial units (at least one).
        size:            Target population size (default: ``len(units)``).
        breed_factor:    Offspring per epoch as a fraction of ``size``.
        survival_factor: Survivors per epoch as a fraction of ``size``.
        seed:            Seed for a fresh generator (ignored if ``rng`` is given).
        rng:             Generator to use for selection and breeding.
    """

    def __init__(
        self,
        units: Sequence[U],
        size: int | None = None,
        breed_factor: float = 0.3,
        survival_factor: float = 0.5,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        if not units:
            raise EmptyPopulationError("A population needs at least one unit")
        if size is not None and size < 1:
            raise ValueError(f"size must be at least 1, got {size}")
        if breed_factor <= 0:
            raise ValueError(f"breed_factor must be positive, got {breed_factor}")
        if not 0 < survival_factor <= 1:
            raise ValueError(f"survival_factor must be in (0, 1], got {survival_factor}")

        self.size = size if size is not None else len(units)
        self.breed_factor = breed_factor
        self.survival_factor = survival_factor
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._scored: list[tuple[float, U]] = sorted(
            ((unit.fitness(), unit) for unit in units), key=_by_fitness, reverse=True
        )
        self.epoch = 0
        self.history: list[EpochStats] = []

    # ── Accessors ───────────────────────────────────────────────────────────

    @property
    def units(self) -> list[U]:
        """Current units, best first."""
        return [unit for _, unit in self._scored]

    @property
    def fitnesses(self) -> list[float]:
        return [score for score, _ in self._scored]

    def best(self) -> U:
        return self._scored[0][1]

    @property
    def best_fitness(self) -> float:
        return self._scored[0][0]

    def __len__(self) -> int:
        return len(self._scored)

    # ── Epoch loop ──────────────────────────────────────────────────────────

    def epochs(
        self,
        count: int,
        on_epoch: Callable[[EpochStats], None] | None = None,
    ) -> Population[U]:
        """Run ``count`` epochs on the calling thread."""
        for _ in range(count):
            self._run_epoch(self._breed, on_epoch)
        return self

    def epochs_parallel(
        self,
        count: int,
        workers: int,
        on_epoch: Callable[[EpochStats], None] | None = None,
    ) -> Population[U]:
        """
        Run ``count`` epochs, breeding offspring on ``workers`` processes.

        Units must be picklable. See the module docstring for the
        reproducibility trade-off.
        """
        if workers <= 1:
            return self.epochs(count, on_epoch)

        with ProcessPoolExecutor(max_workers=workers) as executor:

            def breed(parents: list[tuple[float, U]], n: int) -> list[tuple[float, U]]:
                tasks = []
                for _ in range(n):
                    parent_a, parent_b = self._select_parents(parents)
                    seed = int(self._rng.integers(0, 2**63 - 1))
                    tasks.append((parent_a, parent_b, seed))
                # map() yields in submission order, independent of scheduling
                return list(executor.map(_breed_pair, tasks))

            for _ in range(count):
                self._run_epoch(breed, on_epoch)
        return self

    def finish(self) -> list[U]:
        """Final units, best first."""
        return self.units

    def _run_epoch(
        self,
        breed: Callable[[list[tuple[float, U]], int], list[tuple[float, U]]],
        on_epoch: Callable[[EpochStats], None] | None,
    ) -> None:
        n_offspring = max(1, int(self.breed_factor * self.size))
        pool = self._scored + breed(self._scored, n_offspring)
        pool.sort(key=_by_fitness, reverse=True)

        quota = max(1, int(self.survival_factor * self.size))
        survivors = pool[:quota]
        if len(survivors) < self.size:
            survivors += breed(survivors, self.size - len(survivors))
            survivors.sort(key=_by_fitness, reverse=True)

        self._scored = survivors
        self.epoch += 1

        stats = EpochStats(
            epoch=self.epoch,
            best_fitness=self._scored[0][0],
            mean_fitness=float(np.mean(self.fitnesses)),
        )
        self.history.append(stats)
        logger.debug(
            "epoch %d: best=%.6f mean=%.6f size=%d",
            stats.epoch, stats.best_fitness, stats.mean_fitness, len(self._scored),
        )
        if on_epoch is not None:
            on_epoch(stats)

    # ── Selection & breeding ────────────────────────────────────────────────

    def _select_parents(self, parents: list[tuple[float, U]]) -> tuple[U, U]:
        """
        Linear rank selection: the unit at rank r of n has weight n - r.

        ``parents`` must be sorted best first. Two distinct parents are
        drawn whenever more than one is available.
        """
        n = len(parents)
        if n == 1:
            return parents[0][1], parents[0][1]
        weights = np.arange(n, 0, -1, dtype=float)
        idx_a, idx_b = self._rng.choice(n, size=2, replace=False, p=weights / weights.sum())
        return parents[int(idx_a)][1], parents[int(idx_b)][1]

    def _breed(self, parents: list[tuple[float, U]], n: int) -> list[tuple[float, U]]:
        offspring = []
        for _ in range(n):
            parent_a, parent_b = self._select_parents(parents)
            child = parent_a.breed_with(parent_b, self._rng)
            offspring.append((child.fitness(), child))
        return offspring
