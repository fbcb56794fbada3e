"""Core data models for one-dimensional cutting stock."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator


@dataclass(frozen=True)
class DemandPiece:
    """A required cut piece. ``id`` is its index in the catalog."""

    id: int
    length: int  # working units


class PieceCatalog:
    """
    Immutable arena of demand pieces.

    Bins refer to pieces by catalog index only, so the catalog can be
    shared by every candidate solution in a run (and pickled along with
    them for worker processes).
    """

    def __init__(self, lengths: Iterable[int]):
        self.lengths: tuple[int, ...] = tuple(int(length) for length in lengths)
        for piece_id, length in enumerate(self.lengths):
            if length <= 0:
                raise ValueError(f"Demand piece #{piece_id} must have a positive length, got {length}")

    def __len__(self) -> int:
        return len(self.lengths)

    def __getitem__(self, piece_id: int) -> DemandPiece:
        return DemandPiece(id=piece_id, length=self.lengths[piece_id])

    def __iter__(self) -> Iterator[DemandPiece]:
        for piece_id, length in enumerate(self.lengths):
            yield DemandPiece(id=piece_id, length=length)

    @property
    def ids(self) -> range:
        return range(len(self.lengths))

    @property
    def total_length(self) -> int:
        return sum(self.lengths)

    def __repr__(self) -> str:
        return f"PieceCatalog(pieces={len(self)}, total_length={self.total_length})"


class Bin:
    """
    One stock piece with demand pieces placed left to right.

    Consecutive pieces are separated by ``spacing`` (the blade width), so
    the used length of a bin holding ``n`` pieces is the sum of their
    lengths plus ``spacing * (n - 1)``. That used length never exceeds
    ``capacity``.
    """

    def __init__(self, capacity: int, spacing: int, catalog: PieceCatalog):
        self.capacity = capacity
        self.spacing = spacing
        self.catalog = catalog
        self.pieces: list[int] = []
        self._load = 0  # sum of piece lengths, spacing excluded

    @property
    def used_length(self) -> int:
        """Length consumed by pieces and the cuts between them."""
        if len(self.pieces) > 1:
            return self._load + self.spacing * (len(self.pieces) - 1)
        return self._load

    @property
    def remaining(self) -> int:
        return self.capacity - self.used_length

    @property
    def is_empty(self) -> bool:
        return not self.pieces

    def fitness(self) -> float:
        """Squared utilization in [0, 1]; near-full bins dominate."""
        return (self.used_length / self.capacity) ** 2

    def insert(self, piece_id: int) -> int | None:
        """
        Append a piece after the ones already placed.

        Returns:
            The offset of the new piece from the start of the bin, or None
            if it does not fit (the bin is left unchanged).
        """
        length = self.catalog.lengths[piece_id]
        offset = self.used_length + self.spacing if self.pieces else 0
        if offset + length > self.capacity:
            return None
        self.pieces.append(piece_id)
        self._load += length
        return offset

    def remove(self, piece_ids: set[int] | frozenset[int]) -> int:
        """Remove every piece whose id is in ``piece_ids``; return how many were removed."""
        kept = [p for p in self.pieces if p not in piece_ids]
        removed = len(self.pieces) - len(kept)
        if removed:
            self.pieces = kept
            self._load = sum(self.catalog.lengths[p] for p in kept)
        return removed

    def copy(self) -> Bin:
        clone = Bin(self.capacity, self.spacing, self.catalog)
        clone.pieces = list(self.pieces)
        clone._load = self._load
        return clone

    def __repr__(self) -> str:
        return (
            f"Bin(capacity={self.capacity}, pieces={len(self.pieces)}, "
            f"used={self.used_length}, fitness={self.fitness():.3f})"
        )


@dataclass(frozen=True)
class CutPiece:
    """A demand piece placed on a stock piece, in real-valued units."""

    location: float  # offset from the start of the stock piece
    length: float

    def to_dict(self) -> dict[str, float]:
        return {"location": self.location, "length": self.length}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CutPiece:
        return cls(location=d["location"], length=d["length"])


@dataclass(frozen=True)
class StockPiece:
    """A used stock piece and the cuts made from it, longest first."""

    length: float
    cut_pieces: tuple[CutPiece, ...] = ()
    blade_width: float = 0.0

    @property
    def used_length(self) -> float:
        """Length of all cut pieces plus the kerf between them."""
        if not self.cut_pieces:
            return 0.0
        cuts = sum(piece.length for piece in self.cut_pieces)
        return cuts + self.blade_width * (len(self.cut_pieces) - 1)

    @property
    def waste(self) -> float:
        return max(0.0, self.length - self.used_length)

    def to_dict(self) -> dict[str, Any]:
        return {
            "length": self.length,
            "blade_width": self.blade_width,
            "cut_pieces": [piece.to_dict() for piece in self.cut_pieces],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StockPiece:
        return cls(
            length=d["length"],
            cut_pieces=tuple(CutPiece.from_dict(p) for p in d["cut_pieces"]),
            blade_width=d.get("blade_width", 0.0),
        )


@dataclass(frozen=True)
class Solution:
    """
    Read-only cutting plan produced by an optimization run.

    Attributes:
        fitness:      Mean squared utilization of the stock pieces, in [0, 1].
        stock_pieces: Used stock pieces in the order the optimizer kept them.
    """

    fitness: float
    stock_pieces: tuple[StockPiece, ...] = field(default_factory=tuple)

    @property
    def cut_count(self) -> int:
        return sum(len(stock.cut_pieces) for stock in self.stock_pieces)

    @property
    def total_stock_length(self) -> float:
        return sum(stock.length for stock in self.stock_pieces)

    @property
    def total_cut_length(self) -> float:
        return sum(piece.length for stock in self.stock_pieces for piece in stock.cut_pieces)

    @property
    def total_waste(self) -> float:
        return sum(stock.waste for stock in self.stock_pieces)

    @property
    def utilization(self) -> float:
        """Share of the used stock length that ends up in cut pieces (0-100)."""
        if not self.stock_pieces:
            return 0.0
        return self.total_cut_length / self.total_stock_length * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "fitness": self.fitness,
            "stock_pieces": [stock.to_dict() for stock in self.stock_pieces],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Solution:
        return cls(
            fitness=d["fitness"],
            stock_pieces=tuple(StockPiece.from_dict(s) for s in d["stock_pieces"]),
        )

    def __repr__(self) -> str:
        return (
            f"Solution(fitness={self.fitness:.4f}, "
            f"stock_pieces={len(self.stock_pieces)}, "
            f"cuts={self.cut_count}, "
            f"util={self.utilization:.1f}%)"
        )
