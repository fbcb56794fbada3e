"""Experiment runner and command-line entry point for cutting-stock problems."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from stockcut.algorithms.optimizer import Optimizer
from stockcut.algorithms.simple_packer import FirstFitDecreasingPacker
from stockcut.core.config import ProblemConfig, load_problem
from stockcut.core.exceptions import InfeasibleInputError
from stockcut.core.models import PieceCatalog, Solution
from stockcut.monitoring.metrics import (
    ExperimentMetrics,
    RunMetrics,
    export_history_to_csv,
    export_solution_to_json,
    export_to_csv,
    export_to_json,
    format_solution,
    print_summary,
)
from stockcut.monitoring.telegram_notifier import (
    format_error,
    format_experiment_start,
    format_final_summary,
    format_progress,
    format_run_complete,
    send_telegram,
)
from stockcut.runner.dataset import EXAMPLE_PROBLEMS, get_example_problem, random_problem

logger = logging.getLogger(__name__)


class ExperimentRunner:
    """
    Solves a set of named cutting problems and collects their metrics.

    Each problem is optimized, compared against a first-fit decreasing
    baseline, and saved. A problem that cannot be packed is recorded as an
    error and the runner moves on to the next one.
    """

    def __init__(
        self,
        results_dir: Path | str = "results",
        send_telegram_updates: bool = True,
        save_plans: bool = True,
    ):
        """
        Initialize experiment runner.

        Args:
            results_dir: Directory to save results (default: "results")
            send_telegram_updates: Whether to send Telegram notifications
            save_plans: Whether to write each cutting plan and its epoch history
        """
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.send_telegram_updates = send_telegram_updates
        self.save_plans = save_plans
        self.solutions: dict[str, Solution] = {}

    async def run_experiment(self, problems: dict[str, ProblemConfig]) -> ExperimentMetrics:
        """
        Solve every problem in order.

        Args:
            problems: Problems keyed by run id.

        Returns:
            ExperimentMetrics with aggregated results
        """
        experiment_id = f"exp_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        metrics = ExperimentMetrics(experiment_id=experiment_id, total_problems=len(problems))
        self.solutions = {}

        if self.send_telegram_updates and problems:
            first = next(iter(problems.values())).optimizer
            await send_telegram(
                format_experiment_start(len(problems), first.population_size, first.epochs)
            )

        for index, (run_id, problem) in enumerate(problems.items(), start=1):
            try:
                solution, run_metrics = self._solve(run_id, problem)
            except (InfeasibleInputError, ValueError) as exc:
                logger.error("%s: %s", run_id, exc)
                metrics.record_error()
                if self.send_telegram_updates:
                    await send_telegram(
                        format_error(type(exc).__name__, str(exc), {"run_id": run_id})
                    )
                continue

            self.solutions[run_id] = solution
            metrics.add_run(run_metrics)
            self._save_results(metrics, suffix=f"_interim_{index}")

            if self.send_telegram_updates:
                await send_telegram(
                    format_run_complete(
                        run_id, run_metrics.stock_pieces_used,
                        run_metrics.utilization_pct, run_metrics.fitness,
                    )
                )
                if index % 5 == 0:
                    await send_telegram(
                        format_progress(index, len(problems), metrics.avg_utilization_pct)
                    )

        metrics.mark_complete()
        self._save_results(metrics, suffix="_final")

        if self.send_telegram_updates:
            await send_telegram(
                format_final_summary(
                    total_runs=metrics.total_runs,
                    total_stock_pieces=metrics.total_stock_pieces,
                    avg_utilization=metrics.avg_utilization_pct,
                    runtime_seconds=metrics.runtime_seconds,
                    errors=metrics.errors_count,
                )
            )
        return metrics

    def _solve(self, run_id: str, problem: ProblemConfig) -> tuple[Solution, RunMetrics]:
        optimizer = Optimizer.from_problem(problem)
        started = time.perf_counter()
        solution = optimizer.optimize()
        runtime = time.perf_counter() - started

        baseline = FirstFitDecreasingPacker(optimizer.stock_lengths, optimizer.spacing).pack(
            PieceCatalog(optimizer.cut_lengths)
        )
        baseline_util = sum(optimizer.cut_lengths) / sum(b.capacity for b in baseline) * 100

        run_metrics = RunMetrics.from_solution(
            run_id,
            solution,
            baseline_stock_pieces=len(baseline),
            baseline_utilization_pct=baseline_util,
            runtime_seconds=runtime,
            seed=problem.seed,
        )
        logger.info(
            "%s: %d stock pieces (baseline %d), utilization %.2f%% (baseline %.2f%%)",
            run_id, run_metrics.stock_pieces_used, len(baseline),
            run_metrics.utilization_pct, baseline_util,
        )

        if self.save_plans:
            export_solution_to_json(solution, self.results_dir / "plans" / f"{run_id}.json")
            export_history_to_csv(optimizer.history, self.results_dir / "plans" / f"{run_id}_history.csv")
        return solution, run_metrics

    def _save_results(self, metrics: ExperimentMetrics, suffix: str = "") -> None:
        """
        Save metrics to JSON and CSV files.

        Args:
            metrics: ExperimentMetrics to save
            suffix: Optional suffix for filename (e.g., "_interim_5")
        """
        base_filename = f"{metrics.experiment_id}{suffix}"

        json_path = self.results_dir / f"{base_filename}.json"
        include_runs = suffix.endswith("_final")
        export_to_json(metrics, json_path, include_runs=include_runs)

        csv_path = self.results_dir / f"{base_filename}_runs.csv"
        export_to_csv(metrics, csv_path)

        logger.debug("saved results to %s and %s", json_path, csv_path)


def _with_overrides(problem: ProblemConfig, args: argparse.Namespace) -> ProblemConfig:
    data: dict[str, Any] = problem.model_dump()
    if args.seed is not None:
        data["seed"] = args.seed
    for key, value in (
        ("population_size", args.population),
        ("epochs", args.epochs),
        ("workers", args.workers),
    ):
        if value is not None:
            data["optimizer"][key] = value
    return ProblemConfig.model_validate(data)


def collect_problems(args: argparse.Namespace) -> dict[str, ProblemConfig]:
    """Gather problems from files, built-in examples and random generation."""
    problems: dict[str, ProblemConfig] = {}
    for path in args.problem:
        problems[Path(path).stem] = load_problem(path)
    for name in args.example:
        problems[name] = get_example_problem(name)
    for i in range(args.random):
        seed = (args.seed or 0) + i
        problems[f"random_{i:03d}"] = random_problem(args.cuts, seed=seed)
    if not problems:
        problems = dict(EXAMPLE_PROBLEMS)
    return {run_id: _with_overrides(problem, args) for run_id, problem in problems.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Optimize one-dimensional cutting plans")
    parser.add_argument("--problem", action="append", default=[], metavar="FILE",
                        help="YAML/JSON problem file (repeatable)")
    parser.add_argument("--example", action="append", default=[],
                        choices=sorted(EXAMPLE_PROBLEMS), help="Built-in example problem (repeatable)")
    parser.add_argument("--random", type=int, default=0, metavar="N",
                        help="Number of random problems to generate (default: 0)")
    parser.add_argument("--cuts", type=int, default=30,
                        help="Cut pieces per random problem (default: 30)")
    parser.add_argument("--population", type=int, default=None, help="Population size override")
    parser.add_argument("--epochs", type=int, default=None, help="Epoch count override")
    parser.add_argument("--workers", type=int, default=None,
                        help="Worker processes for breeding (default: 1, single-process)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed override")
    parser.add_argument("--results-dir", default="results", help="Output directory (default: results)")
    parser.add_argument("--telegram", action="store_true", help="Send Telegram progress updates")
    parser.add_argument("--show-plan", action="store_true", help="Print every cutting plan")
    parser.add_argument("--verbose", action="store_true", help="Debug logging (per-epoch fitness)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Command-line entry point.

    Returns:
        0 on success, 1 if any problem failed, 2 on invalid input files or options.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        problems = collect_problems(args)
    except (OSError, ValidationError, ValueError) as exc:
        print(f"Invalid problem configuration: {exc}", file=sys.stderr)
        return 2

    runner = ExperimentRunner(results_dir=args.results_dir, send_telegram_updates=args.telegram)
    metrics = asyncio.run(runner.run_experiment(problems))

    print(print_summary(metrics))
    if args.show_plan:
        for run_id, solution in runner.solutions.items():
            print(f"\n## {run_id}\n")
            print(format_solution(solution))

    return 1 if metrics.errors_count else 0


if __name__ == "__main__":
    sys.exit(main())
