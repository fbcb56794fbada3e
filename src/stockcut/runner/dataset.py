"""Problem sets for cutting-stock experiments."""

from __future__ import annotations

import numpy as np

from stockcut.core.config import OptimizerConfig, ProblemConfig

EXAMPLE_PROBLEMS: dict[str, ProblemConfig] = {
    "mixed_stock": ProblemConfig(
        stock_lengths=[170.0, 86.5, 50.0, 96.0, 120.0, 90.45, 80.21],
        cut_lengths=[
            40.15, 40.0, 170.0, 145.0, 45.34, 20.1, 30.0, 40.5, 50.89, 60.1, 10.0, 40.5, 10.9,
            10.8, 10.7, 20.1, 20.2, 20.3, 30.4, 80.55, 60.67, 30.9, 90.43, 1.0, 2.0, 3.0, 4.0,
            5.0, 6.0, 7.0, 8.0,
        ],
        blade_width=0.25,
        decimal_places=2,
        seed=100,
    ),
    "two_stock": ProblemConfig(
        stock_lengths=[96.0, 120.0],
        cut_lengths=[
            10.0, 20.0, 30.0, 40.0, 20.0, 60.0, 60.0, 50.0, 70.0, 16.0, 80.0, 10.0, 20.0, 10.0,
            20.0, 30.0, 3.0, 3.0, 96.0, 24.0, 96.0, 120.0, 60.0, 36.0,
        ],
        blade_width=0.0,
        decimal_places=2,
        seed=100,
    ),
}


def generate_cut_lengths(
    count: int = 30,
    seed: int | None = None,
    min_length: float = 5.0,
    max_length: float = 120.0,
    decimal_places: int = 2,
) -> list[float]:
    """
    Generate random cut lengths, uniform in [min_length, max_length].

    Args:
        count: Number of cut pieces.
        seed: Random seed for reproducibility (default: None).
        min_length: Shortest cut length.
        max_length: Longest cut length.
        decimal_places: Rounding applied to each length.

    Returns:
        List of cut lengths.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    if not 0 < min_length <= max_length:
        raise ValueError(f"Invalid length range [{min_length}, {max_length}]")

    rng = np.random.default_rng(seed)
    lengths = rng.uniform(min_length, max_length, size=count)
    return [max(float(round(length, decimal_places)), min_length) for length in lengths]


def random_problem(
    count: int = 30,
    seed: int | None = None,
    stock_lengths: list[float] | None = None,
    blade_width: float = 0.125,
    optimizer: OptimizerConfig | None = None,
) -> ProblemConfig:
    """Build a problem with random cut lengths that all fit the longest stock length."""
    stock_lengths = stock_lengths or [96.0, 120.0, 144.0]
    cut_lengths = generate_cut_lengths(count, seed=seed, max_length=max(stock_lengths))
    return ProblemConfig(
        stock_lengths=stock_lengths,
        cut_lengths=cut_lengths,
        blade_width=blade_width,
        decimal_places=3,
        seed=seed,
        optimizer=optimizer or OptimizerConfig(),
    )


def get_example_problem(name: str) -> ProblemConfig:
    """
    Get a built-in example problem by name.

    Raises:
        ValueError: If the name is not recognized.
    """
    if name not in EXAMPLE_PROBLEMS:
        raise ValueError(
            f"Unknown example problem: {name}. "
            f"Available: {list(EXAMPLE_PROBLEMS.keys())}"
        )
    return EXAMPLE_PROBLEMS[name]
