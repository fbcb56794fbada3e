"""Deterministic first-fit decreasing packer, used as a comparison baseline."""

from __future__ import annotations

from typing import Sequence

from stockcut.core.exceptions import EmptyInputError, InfeasibleInputError
from stockcut.core.models import Bin, PieceCatalog


class FirstFitDecreasingPacker:
    """
    Classic first-fit decreasing.

    Pieces are taken longest first and put in the first bin with room.
    New bins are opened on the longest stock length; once everything is
    placed, each bin is shrunk to the shortest stock length that still
    holds its contents.
    """

    def __init__(self, stock_lengths: Sequence[int], spacing: int = 0):
        if not stock_lengths:
            raise EmptyInputError("At least one stock length is required")
        self.stock_lengths = sorted(stock_lengths)
        self.spacing = spacing

    def pack(self, catalog: PieceCatalog) -> list[Bin]:
        """
        Pack every piece of the catalog.

        Returns:
            Bins in the order they were opened.

        Raises:
            InfeasibleInputError: If a piece is longer than every stock length.
        """
        longest = self.stock_lengths[-1]
        bins: list[Bin] = []

        for piece in sorted(catalog, key=lambda p: p.length, reverse=True):
            if piece.length > longest:
                raise InfeasibleInputError(piece.id, piece.length, longest)
            if not any(bin_.insert(piece.id) is not None for bin_ in bins):
                bin_ = Bin(longest, self.spacing, catalog)
                bin_.insert(piece.id)
                bins.append(bin_)

        for bin_ in bins:
            bin_.capacity = self._shortest_holding(bin_.used_length)
        return bins

    def _shortest_holding(self, used_length: int) -> int:
        for length in self.stock_lengths:
            if length >= used_length:
                return length
        return self.stock_lengths[-1]
