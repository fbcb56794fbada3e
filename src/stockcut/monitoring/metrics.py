"""Metrics tracking and export for cutting-stock runs.

Provides dataclasses for tracking per-problem and per-experiment metrics
and utilities for exporting results to JSON and CSV formats.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np

from stockcut.algorithms.population import EpochStats
from stockcut.core.models import Solution

CSV_FIELDS = [
    "run_id", "fitness", "stock_pieces_used", "cut_pieces", "stock_length_used",
    "waste", "utilization_pct", "baseline_stock_pieces", "baseline_utilization_pct",
    "runtime_seconds", "seed", "finished_at",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunMetrics:
    """Metrics for a single solved problem.

    Attributes:
        run_id: Problem identifier (e.g. "two_stock" or "random_003").
        fitness: Fitness of the best plan, in [0, 1].
        stock_pieces_used: Number of stock pieces in the plan.
        cut_pieces: Number of cut pieces placed.
        stock_length_used: Total length of the stock pieces used.
        waste: Offcut length left after the last cut of each stock piece.
        utilization_pct: Cut length over stock length used (0-100).
        baseline_stock_pieces: Stock pieces used by first-fit decreasing.
        baseline_utilization_pct: Utilization of the first-fit decreasing plan.
        runtime_seconds: Wall-clock time of the optimization.
        seed: Random seed of the run (None if unseeded).
        finished_at: Timestamp when the run finished.
    """

    run_id: str
    fitness: float
    stock_pieces_used: int
    cut_pieces: int
    stock_length_used: float
    waste: float
    utilization_pct: float
    baseline_stock_pieces: int = 0
    baseline_utilization_pct: float = 0.0
    runtime_seconds: float = 0.0
    seed: int | None = None
    finished_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_solution(cls, run_id: str, solution: Solution, **extra: Any) -> RunMetrics:
        """Build metrics from a solution.

        Example:
            >>> from stockcut.core.models import CutPiece, StockPiece
            >>> sol = Solution(1.0, (StockPiece(10.0, (CutPiece(0.0, 5.0), CutPiece(5.0, 5.0))),))
            >>> RunMetrics.from_solution("demo", sol).utilization_pct
            100.0
        """
        return cls(
            run_id=run_id,
            fitness=solution.fitness,
            stock_pieces_used=len(solution.stock_pieces),
            cut_pieces=solution.cut_count,
            stock_length_used=solution.total_stock_length,
            waste=solution.total_waste,
            utilization_pct=solution.utilization,
            **extra,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with ISO timestamp."""
        d = asdict(self)
        d["finished_at"] = self.finished_at.isoformat()
        return d


@dataclass
class ExperimentMetrics:
    """Aggregate metrics for an entire experiment.

    Attributes:
        experiment_id: Unique identifier for the experiment.
        total_problems: Number of problems scheduled.
        total_runs: Number of problems solved.
        total_stock_pieces: Stock pieces used across all runs.
        total_cut_pieces: Cut pieces placed across all runs.
        avg_utilization_pct: Average utilization across runs.
        median_utilization_pct: Median utilization across runs.
        min_utilization_pct: Minimum utilization across runs.
        max_utilization_pct: Maximum utilization across runs.
        avg_fitness: Average best fitness across runs.
        runtime_seconds: Total runtime in seconds.
        errors_count: Number of problems that failed.
        started_at: Experiment start timestamp.
        completed_at: Experiment completion timestamp (None if running).
        run_metrics: Per-run metrics.
    """

    experiment_id: str
    total_problems: int = 0
    total_runs: int = 0
    total_stock_pieces: int = 0
    total_cut_pieces: int = 0
    avg_utilization_pct: float = 0.0
    median_utilization_pct: float = 0.0
    min_utilization_pct: float = 0.0
    max_utilization_pct: float = 0.0
    avg_fitness: float = 0.0
    runtime_seconds: float = 0.0
    errors_count: int = 0
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    run_metrics: list[RunMetrics] = field(default_factory=list)

    def add_run(self, run: RunMetrics) -> None:
        """Add a run's metrics to the experiment.

        Example:
            >>> em = ExperimentMetrics("exp_001", total_problems=2)
            >>> em.add_run(RunMetrics("a", 0.9, 3, 12, 300.0, 12.0, 96.0))
            >>> em.total_stock_pieces
            3
        """
        self.run_metrics.append(run)
        self.total_runs += 1
        self.total_stock_pieces += run.stock_pieces_used
        self.total_cut_pieces += run.cut_pieces
        self._recalculate_stats()

    def record_error(self) -> None:
        self.errors_count += 1

    def mark_complete(self) -> None:
        """Mark experiment as complete and calculate final runtime."""
        self.completed_at = _utcnow()
        self.runtime_seconds = (self.completed_at - self.started_at).total_seconds()

    def _recalculate_stats(self) -> None:
        if not self.run_metrics:
            return
        utilizations = np.array([r.utilization_pct for r in self.run_metrics])
        self.avg_utilization_pct = float(utilizations.mean())
        self.median_utilization_pct = float(np.median(utilizations))
        self.min_utilization_pct = float(utilizations.min())
        self.max_utilization_pct = float(utilizations.max())
        self.avg_fitness = float(np.mean([r.fitness for r in self.run_metrics]))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with ISO timestamps."""
        d = asdict(self)
        d["started_at"] = self.started_at.isoformat()
        d["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        d["run_metrics"] = [r.to_dict() for r in self.run_metrics]
        return d

    def to_summary_dict(self) -> dict[str, Any]:
        """Aggregate metrics only (no run_metrics list)."""
        d = self.to_dict()
        del d["run_metrics"]
        return d


def export_to_json(metrics: ExperimentMetrics, output_path: Path | str, include_runs: bool = True) -> None:
    """Export experiment metrics to a JSON file.

    Args:
        metrics: ExperimentMetrics instance to export.
        output_path: Path to output JSON file.
        include_runs: If True, include per-run metrics. If False, summary only.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = metrics.to_dict() if include_runs else metrics.to_summary_dict()

    with output_path.open("w") as f:
        json.dump(data, f, indent=2)


def export_to_csv(metrics: ExperimentMetrics, output_path: Path | str) -> None:
    """Export per-run metrics to a CSV file (header only when there are no runs)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for run in metrics.run_metrics:
            writer.writerow(run.to_dict())


def export_history_to_csv(history: list[EpochStats], output_path: Path | str) -> None:
    """Write the per-epoch fitness history of a run."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["epoch", "best_fitness", "mean_fitness"])
        writer.writeheader()
        for stats in history:
            writer.writerow(stats.to_dict())


def export_solution_to_json(solution: Solution, output_path: Path | str) -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w") as f:
        json.dump(solution.to_dict(), f, indent=2)


def print_summary(metrics: ExperimentMetrics) -> str:
    """Generate a human-readable summary of experiment metrics.

    Example:
        >>> em = ExperimentMetrics("exp_001", total_problems=1)
        >>> em.add_run(RunMetrics("a", 0.9, 3, 12, 300.0, 12.0, 96.0))
        >>> "Experiment: exp_001" in print_summary(em)
        True
    """
    lines = [
        "=" * 60,
        f"Experiment: {metrics.experiment_id}",
        "=" * 60,
        f"Problems Solved: {metrics.total_runs}/{metrics.total_problems}",
        f"Stock Pieces Used: {metrics.total_stock_pieces}",
        f"Cut Pieces Placed: {metrics.total_cut_pieces}",
        f"Average Fitness: {metrics.avg_fitness:.4f}",
        "",
        "Utilization Statistics:",
        f"  Average: {metrics.avg_utilization_pct:.2f}%",
        f"  Median:  {metrics.median_utilization_pct:.2f}%",
        f"  Min:     {metrics.min_utilization_pct:.2f}%",
        f"  Max:     {metrics.max_utilization_pct:.2f}%",
        "",
        f"Runtime: {metrics.runtime_seconds:.1f} seconds ({metrics.runtime_seconds / 60:.1f} minutes)",
        f"Errors: {metrics.errors_count}",
        "",
        f"Started:   {metrics.started_at.isoformat()}",
        f"Completed: {metrics.completed_at.isoformat() if metrics.completed_at else 'In Progress'}",
        "=" * 60,
    ]
    return "\n".join(lines)


def format_solution(solution: Solution) -> str:
    """Render a cutting plan, one block per stock piece.

    Example:
        >>> from stockcut.core.models import CutPiece, StockPiece
        >>> sol = Solution(0.25, (StockPiece(10.0, (CutPiece(0.0, 5.0),)),))
        >>> print(format_solution(sol))
        Optimization fitness: 0.25
        <BLANKLINE>
        Stock piece: 10.0
            loc: 0.0       len: 5.0
    """
    lines = [f"Optimization fitness: {solution.fitness}"]
    for stock in solution.stock_pieces:
        lines.append("")
        lines.append(f"Stock piece: {stock.length}")
        for piece in stock.cut_pieces:
            lines.append(f"    loc: {piece.location!s:<10}len: {piece.length}")
    return "\n".join(lines)
