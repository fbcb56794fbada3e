"""Exception types raised by the cutting-stock optimizer."""

from __future__ import annotations


class StockCutError(Exception):
    """Base class for all optimizer errors."""


class EmptyInputError(StockCutError, ValueError):
    """Raised when there are no stock lengths or no cut lengths to pack."""


class InfeasibleInputError(StockCutError):
    """
    Raised when a demand piece is longer than every available stock length.

    No packing can ever place such a piece, so the whole run fails.

    Attributes:
        piece_id: Catalog index of the offending piece.
        length:   Its length in working units.
    """

    def __init__(self, piece_id: int, length: int, max_stock_length: int | None = None):
        self.piece_id = piece_id
        self.length = length
        self.max_stock_length = max_stock_length
        message = f"Demand piece #{piece_id} (length {length}) does not fit any stock length"
        if max_stock_length is not None:
            message += f" (longest stock length is {max_stock_length})"
        super().__init__(message)


class EmptyPopulationError(StockCutError):
    """Raised when a population is created without any units."""
