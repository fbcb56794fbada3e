"""Fixed-point conversion between real lengths and integer working units."""

from __future__ import annotations


class LengthScale:
    """
    Converts real-valued lengths to integer working units and back.

    All packing arithmetic runs on integers so that "does this piece fit"
    never depends on floating-point rounding. A scale with
    ``decimal_places=2`` keeps lengths to the hundredth.

    Example:
        >>> scale = LengthScale(2)
        >>> scale.to_units(90.45)
        9045
        >>> scale.to_length(9045)
        90.45
    """

    MAX_DECIMAL_PLACES = 9

    def __init__(self, decimal_places: int = 2):
        if not 0 <= decimal_places <= self.MAX_DECIMAL_PLACES:
            raise ValueError(
                f"decimal_places must be between 0 and {self.MAX_DECIMAL_PLACES}, "
                f"got {decimal_places}"
            )
        self.decimal_places = decimal_places
        self.multiplier = 10 ** decimal_places

    def to_units(self, length: float) -> int:
        """Round a non-negative real length to the nearest working unit."""
        if length < 0:
            raise ValueError(f"Lengths must be non-negative, got {length}")
        return int(round(length * self.multiplier))

    def to_length(self, units: int) -> float:
        return round(units / self.multiplier, self.decimal_places)

    def __repr__(self) -> str:
        return f"LengthScale(decimal_places={self.decimal_places})"
