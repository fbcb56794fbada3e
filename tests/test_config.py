"""Tests for configuration models and problem files."""

import pytest
from pydantic import ValidationError

from stockcut.core.config import OptimizerConfig, ProblemConfig, dump_problem, load_problem


class TestOptimizerConfig:
    def test_defaults(self):
        config = OptimizerConfig()
        assert config.population_size == 100
        assert config.epochs == 1000
        assert config.breed_factor == 0.3
        assert config.survival_factor == 0.5
        assert config.workers == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"population_size": 0},
            {"epochs": -1},
            {"breed_factor": 0.0},
            {"survival_factor": 1.5},
            {"workers": 0},
            {"mutation_rate": 0.1},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            OptimizerConfig(**kwargs)

    def test_frozen(self):
        config = OptimizerConfig()
        with pytest.raises(ValidationError):
            config.epochs = 5


class TestProblemConfig:
    def test_minimal_problem(self):
        problem = ProblemConfig(stock_lengths=[10], cut_lengths=[4, 4])
        assert problem.blade_width == 0.0
        assert problem.decimal_places == 2
        assert problem.seed is None
        assert problem.optimizer == OptimizerConfig()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"stock_lengths": [], "cut_lengths": [1]},
            {"stock_lengths": [10], "cut_lengths": []},
            {"stock_lengths": [10], "cut_lengths": [-1]},
            {"stock_lengths": [10], "cut_lengths": [1], "blade_width": -0.5},
            {"stock_lengths": [10], "cut_lengths": [1], "decimal_places": 10},
        ],
    )
    def test_invalid_problem_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            ProblemConfig(**kwargs)


class TestProblemFiles:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "problem.yaml"
        path.write_text(
            "stock_lengths: [96, 120]\n"
            "cut_lengths: [10, 20.5, 96]\n"
            "blade_width: 0.125\n"
            "decimal_places: 3\n"
            "seed: 100\n"
            "optimizer:\n"
            "  population_size: 30\n"
            "  epochs: 50\n"
        )
        problem = load_problem(path)
        assert problem.stock_lengths == [96.0, 120.0]
        assert problem.cut_lengths == [10.0, 20.5, 96.0]
        assert problem.seed == 100
        assert problem.optimizer.population_size == 30
        assert problem.optimizer.breed_factor == 0.3

    def test_load_json(self, tmp_path):
        path = tmp_path / "problem.json"
        path.write_text('{"stock_lengths": [10], "cut_lengths": [5, 5]}')
        assert load_problem(path).cut_lengths == [5.0, 5.0]

    def test_dump_then_load(self, tmp_path):
        problem = ProblemConfig(
            stock_lengths=[96, 120], cut_lengths=[10, 30], seed=4,
            optimizer=OptimizerConfig(epochs=10),
        )
        path = tmp_path / "nested" / "problem.yaml"
        dump_problem(problem, path)
        assert load_problem(path) == problem

    def test_empty_file_is_invalid(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValidationError):
            load_problem(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_problem(tmp_path / "missing.yaml")
