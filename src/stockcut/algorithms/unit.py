"""
Candidate solution for the evolutionary search: a full packing of the catalog.

A ``BinPackerUnit`` is a sequence of bins that together hold every demand
piece exactly once. It is built by first-fit over a shuffled piece order,
and bred by crossover (inject a run of the other parent's bins, evict
duplicates, re-pack the evicted pieces) followed by an occasional mutation.

New bins take a stock length chosen at random among those long enough for
the piece, so different units explore different stock mixes.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from stockcut.algorithms.population import Breedable
from stockcut.core.exceptions import InfeasibleInputError
from stockcut.core.models import Bin, PieceCatalog

# One draw in [0, MUTATION_ODDS): 0 -> elimination, 1 -> inversion, else nothing.
MUTATION_ODDS = 20


class BinPackerUnit(Breedable):
    """
    One packing of all demand pieces into bins.

    Args:
        stock_lengths: Allowed bin capacities (working units).
        catalog:       Demand pieces shared by every unit of a run.
        spacing:       Blade width between adjacent pieces (working units).
        bins:          Initial bins; normally built through ``pack()``.
    """

    def __init__(
        self,
        stock_lengths: Sequence[int],
        catalog: PieceCatalog,
        spacing: int,
        bins: list[Bin] | None = None,
    ):
        self.stock_lengths = tuple(stock_lengths)
        self.catalog = catalog
        self.spacing = spacing
        self.bins: list[Bin] = bins if bins is not None else []

    @classmethod
    def pack(
        cls,
        stock_lengths: Sequence[int],
        catalog: PieceCatalog,
        order: Iterable[int],
        spacing: int,
        rng: np.random.Generator,
    ) -> BinPackerUnit:
        """
        Build a unit by first-fitting pieces in the given order.

        Raises:
            InfeasibleInputError: If some piece fits no stock length.
        """
        unit = cls(stock_lengths, catalog, spacing)
        for piece_id in order:
            unit.first_fit(piece_id, rng)
        return unit

    # ── Placement ───────────────────────────────────────────────────────────

    def first_fit(self, piece_id: int, rng: np.random.Generator) -> int:
        """Place a piece in the first bin with room, opening a new bin if needed."""
        for bin_ in self.bins:
            offset = bin_.insert(piece_id)
            if offset is not None:
                return offset
        return self._add_to_new_bin(piece_id, rng)

    def _add_to_new_bin(self, piece_id: int, rng: np.random.Generator) -> int:
        length = self.catalog.lengths[piece_id]
        candidates = [stock for stock in self.stock_lengths if stock >= length]
        if not candidates:
            raise InfeasibleInputError(
                piece_id, length, max(self.stock_lengths) if self.stock_lengths else None
            )
        capacity = candidates[int(rng.integers(0, len(candidates)))]
        bin_ = Bin(capacity, self.spacing, self.catalog)
        bin_.insert(piece_id)
        self.bins.append(bin_)
        return 0

    # ── Fitness ─────────────────────────────────────────────────────────────

    def fitness(self) -> float:
        """Mean bin fitness, so units with different bin counts compare fairly."""
        if not self.bins:
            return 0.0
        return sum(bin_.fitness() for bin_ in self.bins) / len(self.bins)

    def piece_ids(self) -> list[int]:
        return [piece_id for bin_ in self.bins for piece_id in bin_.pieces]

    def is_complete(self) -> bool:
        """True if every catalog piece appears exactly once."""
        return sorted(self.piece_ids()) == list(self.catalog.ids)

    # ── Breeding ────────────────────────────────────────────────────────────

    def breed_with(self, other: BinPackerUnit, rng: np.random.Generator) -> BinPackerUnit:
        child = self.crossover(other, rng)
        child.mutate(rng)
        return child

    def crossover(self, other: BinPackerUnit, rng: np.random.Generator) -> BinPackerUnit:
        """
        Inject a run of ``other``'s bins into a copy of this unit.

        Any bin of this unit that shares a piece with the injected run is
        dropped whole, and its other pieces are re-packed with first-fit.
        """
        cross_dest = int(rng.integers(0, len(self.bins)))
        cross_src_start = int(rng.integers(0, len(other.bins)))
        cross_src_end = int(rng.integers(cross_src_start, len(other.bins) + 1))

        injected = [bin_.copy() for bin_ in other.bins[cross_src_start:cross_src_end]]
        injected_ids = {piece_id for bin_ in injected for piece_id in bin_.pieces}

        displaced: list[int] = []

        def strip(bins: list[Bin]) -> list[Bin]:
            kept: list[Bin] = []
            for bin_ in reversed(bins):
                clone = bin_.copy()
                if clone.remove(injected_ids):
                    displaced.extend(clone.pieces)
                else:
                    kept.append(clone)
            kept.reverse()
            return kept

        # back to front: bins after the insertion point first
        tail = strip(self.bins[cross_dest:])
        head = strip(self.bins[:cross_dest])

        child = BinPackerUnit(self.stock_lengths, self.catalog, self.spacing, head + injected + tail)
        for piece_id in displaced:
            child.first_fit(piece_id, rng)
        return child

    # ── Mutation ────────────────────────────────────────────────────────────

    def mutate(self, rng: np.random.Generator) -> None:
        roll = int(rng.integers(0, MUTATION_ODDS))
        if roll == 0:
            self.elimination(rng)
        elif roll == 1:
            self.inversion(rng)

    def elimination(self, rng: np.random.Generator) -> None:
        """Remove the least-fit non-full bin and re-pack its pieces in random order."""
        worst_fitness = 1.0
        worst_idx = None
        for i, bin_ in enumerate(self.bins):
            fitness = bin_.fitness()
            if fitness < worst_fitness:
                worst_fitness = fitness
                worst_idx = i

        if worst_idx is None:
            return

        worst = self.bins.pop(worst_idx)
        for i in rng.permutation(len(worst.pieces)):
            self.first_fit(worst.pieces[int(i)], rng)

    def inversion(self, rng: np.random.Generator) -> None:
        """Reverse a random run of bins. Contents and fitness are unchanged."""
        if len(self.bins) < 2:
            return
        start = int(rng.integers(0, len(self.bins)))
        end = int(rng.integers(start, len(self.bins) + 1))
        self.bins[start:end] = self.bins[start:end][::-1]

    def __repr__(self) -> str:
        return f"BinPackerUnit(bins={len(self.bins)}, fitness={self.fitness():.4f})"
