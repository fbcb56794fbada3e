"""
Configuration models for optimizer runs.

``OptimizerConfig`` holds the search parameters, ``ProblemConfig`` one
complete cutting problem. Both validate on construction, so a bad YAML
file fails with a pydantic ``ValidationError`` before any work starts.

Example problem file::

    stock_lengths: [96, 120]
    cut_lengths: [10, 20, 30, 40, 96]
    blade_width: 0.125
    decimal_places: 3
    seed: 100
    optimizer:
      population_size: 60
      epochs: 400
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat


class OptimizerConfig(BaseModel):
    """Tuneable parameters of the evolutionary search."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    population_size: int = Field(100, ge=1)
    epochs: int = Field(1000, ge=0)
    breed_factor: float = Field(0.3, gt=0.0)
    survival_factor: float = Field(0.5, gt=0.0, le=1.0)
    workers: int = Field(1, ge=1)


class ProblemConfig(BaseModel):
    """One cutting problem in real-valued lengths."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stock_lengths: list[PositiveFloat] = Field(min_length=1)
    cut_lengths: list[PositiveFloat] = Field(min_length=1)
    blade_width: NonNegativeFloat = 0.0
    decimal_places: int = Field(2, ge=0, le=9)
    seed: int | None = None
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)


def load_problem(path: Path | str) -> ProblemConfig:
    """
    Load a problem from a YAML (or JSON) file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the content is not a valid problem.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)
    return ProblemConfig.model_validate(data or {})


def dump_problem(problem: ProblemConfig, path: Path | str) -> None:
    """Write a problem to a YAML file that ``load_problem`` reads back."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(problem.model_dump(), f, sort_keys=False)
