"""Tests for run metrics and their export."""

import csv
import json

import pytest

from stockcut.algorithms.population import EpochStats
from stockcut.core.models import CutPiece, Solution, StockPiece
from stockcut.monitoring.metrics import (
    CSV_FIELDS,
    ExperimentMetrics,
    RunMetrics,
    export_history_to_csv,
    export_solution_to_json,
    export_to_csv,
    export_to_json,
    format_solution,
    print_summary,
)


@pytest.fixture
def solution():
    return Solution(
        fitness=0.8,
        stock_pieces=(
            StockPiece(10.0, (CutPiece(0.0, 6.0), CutPiece(6.5, 3.5)), blade_width=0.5),
            StockPiece(8.0, (CutPiece(0.0, 4.0),), blade_width=0.5),
        ),
    )


@pytest.fixture
def experiment(solution):
    metrics = ExperimentMetrics("exp_test", total_problems=3)
    metrics.add_run(RunMetrics.from_solution("a", solution, seed=1))
    metrics.add_run(RunMetrics("b", 1.0, 1, 2, 10.0, 0.0, 100.0))
    metrics.record_error()
    return metrics


# ---------------------------------------------------------------------------
# 1. Aggregation
# ---------------------------------------------------------------------------

class TestRunMetrics:
    def test_from_solution(self, solution):
        run = RunMetrics.from_solution("a", solution, runtime_seconds=1.5)
        assert run.stock_pieces_used == 2
        assert run.cut_pieces == 3
        assert run.stock_length_used == 18.0
        assert run.waste == pytest.approx(4.0)
        assert run.utilization_pct == pytest.approx(75.0)
        assert run.runtime_seconds == 1.5

    def test_to_dict_has_csv_fields(self, solution):
        d = RunMetrics.from_solution("a", solution).to_dict()
        assert set(d) == set(CSV_FIELDS)
        assert isinstance(d["finished_at"], str)


class TestExperimentMetrics:
    def test_totals(self, experiment):
        assert experiment.total_runs == 2
        assert experiment.total_stock_pieces == 3
        assert experiment.total_cut_pieces == 5
        assert experiment.errors_count == 1

    def test_statistics(self, experiment):
        assert experiment.avg_utilization_pct == pytest.approx(87.5)
        assert experiment.median_utilization_pct == pytest.approx(87.5)
        assert experiment.min_utilization_pct == pytest.approx(75.0)
        assert experiment.max_utilization_pct == pytest.approx(100.0)
        assert experiment.avg_fitness == pytest.approx(0.9)

    def test_mark_complete(self, experiment):
        assert experiment.completed_at is None
        experiment.mark_complete()
        assert experiment.completed_at is not None
        assert experiment.runtime_seconds >= 0

    def test_summary_dict_omits_runs(self, experiment):
        assert "run_metrics" not in experiment.to_summary_dict()
        assert len(experiment.to_dict()["run_metrics"]) == 2


# ---------------------------------------------------------------------------
# 2. Export
# ---------------------------------------------------------------------------

class TestExport:
    def test_json(self, experiment, tmp_path):
        path = tmp_path / "out" / "exp.json"
        export_to_json(experiment, path)
        data = json.loads(path.read_text())
        assert data["experiment_id"] == "exp_test"
        assert [r["run_id"] for r in data["run_metrics"]] == ["a", "b"]

    def test_json_summary_only(self, experiment, tmp_path):
        path = tmp_path / "exp.json"
        export_to_json(experiment, path, include_runs=False)
        assert "run_metrics" not in json.loads(path.read_text())

    def test_csv(self, experiment, tmp_path):
        path = tmp_path / "runs.csv"
        export_to_csv(experiment, path)
        with path.open() as f:
            rows = list(csv.DictReader(f))
        assert [row["run_id"] for row in rows] == ["a", "b"]
        assert rows[0]["seed"] == "1"

    def test_csv_without_runs_has_header(self, tmp_path):
        path = tmp_path / "runs.csv"
        export_to_csv(ExperimentMetrics("empty"), path)
        assert path.read_text().strip() == ",".join(CSV_FIELDS)

    def test_history_csv(self, tmp_path):
        path = tmp_path / "history.csv"
        export_history_to_csv([EpochStats(1, 0.5, 0.25), EpochStats(2, 0.75, 0.5)], path)
        with path.open() as f:
            rows = list(csv.DictReader(f))
        assert rows[1] == {"epoch": "2", "best_fitness": "0.75", "mean_fitness": "0.5"}

    def test_solution_json(self, solution, tmp_path):
        path = tmp_path / "plan.json"
        export_solution_to_json(solution, path)
        assert Solution.from_dict(json.loads(path.read_text())) == solution


# ---------------------------------------------------------------------------
# 3. Text output
# ---------------------------------------------------------------------------

class TestText:
    def test_summary(self, experiment):
        text = print_summary(experiment)
        assert "Experiment: exp_test" in text
        assert "Problems Solved: 2/3" in text
        assert "Errors: 1" in text
        assert "In Progress" in text

    def test_format_solution(self, solution):
        lines = format_solution(solution).splitlines()
        assert lines[0] == "Optimization fitness: 0.8"
        assert lines[1] == ""
        assert lines[2] == "Stock piece: 10.0"
        assert lines[3] == "    loc: 0.0       len: 6.0"
        assert lines[4] == "    loc: 6.5       len: 3.5"
        assert lines[6] == "Stock piece: 8.0"
